"""Typed result objects returned by the flow engine and navigation manager."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from .ir import Question

NavigationActionType = Literal["next", "previous", "skip", "jumpTo", "exit"]


@dataclass(frozen=True, slots=True)
class QuestionResult:
    """The traversal moved to ``question``."""

    question: Question
    type: Literal["question"] = "question"


@dataclass(frozen=True, slots=True)
class FlowComplete:
    """No visible question remains; ``responses`` is a snapshot of all answers."""

    responses: dict[str, Any] = field(default_factory=dict)
    type: Literal["complete"] = "complete"


FlowResult = QuestionResult | FlowComplete


@dataclass(frozen=True, slots=True)
class ProgressInfo:
    current_question: int
    total_questions: int
    answered_questions: int
    percent_complete: int
    is_completed: bool


@dataclass(frozen=True, slots=True)
class NavigationAction:
    """A navigation request from the presentation layer."""

    type: NavigationActionType
    # Recorded for the current question on "next" unless None
    answer: Any = None
    question_id: str | None = None


@dataclass(frozen=True, slots=True)
class NavigationResult:
    success: bool
    result: FlowResult | None = None
    error: str | None = None


__all__ = [
    "FlowComplete",
    "FlowResult",
    "NavigationAction",
    "NavigationActionType",
    "NavigationResult",
    "ProgressInfo",
    "QuestionResult",
]
