"""Exception hierarchy for questionnaire navigation.

Two families matter to callers: ``ConditionEvaluationError`` for conditions that
cannot be evaluated at all, and ``FlowError`` for navigation and session
problems. Storage collaborators raise ``StorageError`` subclasses.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from questionflow.flow_core.ir import Condition


class QuestionFlowError(Exception):
    """Base exception for all questionflow errors."""


class ConditionEvaluationError(QuestionFlowError):
    """Raised for an unknown operator or a pattern that does not compile."""

    def __init__(self, message: str, condition: Condition | None = None) -> None:
        super().__init__(message)
        self.condition = condition


class FlowErrorCode(str, Enum):
    """Error codes carried by ``FlowError``."""

    QUESTION_NOT_FOUND = "QUESTION_NOT_FOUND"
    INVALID_NAVIGATION = "INVALID_NAVIGATION"
    CONDITION_ERROR = "CONDITION_ERROR"
    SESSION_ERROR = "SESSION_ERROR"
    STATE_CORRUPTION = "STATE_CORRUPTION"
    NO_CURRENT_QUESTION = "NO_CURRENT_QUESTION"
    QUESTIONNAIRE_NOT_LOADED = "QUESTIONNAIRE_NOT_LOADED"


class FlowError(QuestionFlowError):
    """Raised by the flow engine when a navigation request cannot be honoured."""

    def __init__(
        self,
        message: str,
        code: FlowErrorCode,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        return f"[{self.code.value}] {super().__str__()}"


class StorageError(QuestionFlowError):
    """Base exception for storage collaborator failures."""


class QuestionnaireNotFoundError(StorageError):
    """Raised when a questionnaire is not found."""


class SessionNotFoundError(StorageError):
    """Raised when a session is not found."""


class ResponseNotFoundError(StorageError):
    """Raised when a response record is not found."""


__all__ = [
    "ConditionEvaluationError",
    "FlowError",
    "FlowErrorCode",
    "QuestionFlowError",
    "QuestionnaireNotFoundError",
    "ResponseNotFoundError",
    "SessionNotFoundError",
    "StorageError",
]
