"""Traversal state of one flow session, with a plain-data persistence form."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from questionflow.core.errors import FlowError, FlowErrorCode

_STATE_FIELDS = (
    "current_question_index",
    "current_question_id",
    "responses",
    "visited_questions",
    "skipped_questions",
    "question_history",
    "is_completed",
    "start_time",
    "last_update_time",
)


def _now() -> datetime:
    return datetime.now(UTC)


def _string_list(name: str, value: Any) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise TypeError(f"{name} must be a list of strings")
    return list(value)


def _decode_responses(value: Any) -> dict[str, Any]:
    if not isinstance(value, list):
        raise TypeError("responses must be a list of [question_id, answer] pairs")
    responses: dict[str, Any] = {}
    for pair in value:
        if not isinstance(pair, list | tuple) or len(pair) != 2 or not isinstance(pair[0], str):
            raise TypeError("responses must be a list of [question_id, answer] pairs")
        responses[pair[0]] = pair[1]
    return responses


@dataclass(slots=True)
class FlowState:
    """Position, history and answers of a questionnaire traversal."""

    questionnaire_id: str
    session_id: str
    current_question_index: int = 0
    current_question_id: str | None = None
    responses: dict[str, Any] = field(default_factory=dict)
    visited_questions: set[str] = field(default_factory=set)
    skipped_questions: set[str] = field(default_factory=set)
    question_history: list[str] = field(default_factory=list)
    is_completed: bool = False
    start_time: datetime = field(default_factory=_now)
    last_update_time: datetime = field(default_factory=_now)

    def touch(self) -> None:
        self.last_update_time = _now()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to plain lists and strings for the storage collaborator."""
        return {
            "current_question_index": self.current_question_index,
            "current_question_id": self.current_question_id,
            "responses": [[question_id, value] for question_id, value in self.responses.items()],
            "visited_questions": sorted(self.visited_questions),
            "skipped_questions": sorted(self.skipped_questions),
            "question_history": list(self.question_history),
            "is_completed": self.is_completed,
            "start_time": self.start_time.isoformat(),
            "last_update_time": self.last_update_time.isoformat(),
        }

    @classmethod
    def from_dict(cls, questionnaire_id: str, session_id: str, data: dict[str, Any]) -> FlowState:
        """Rebuild state saved by ``to_dict``.

        Raises:
            FlowError: ``STATE_CORRUPTION`` when a field is missing or has the
                wrong shape. Nothing is defaulted.
        """
        context = {"session_id": session_id}
        if not isinstance(data, dict):
            raise FlowError("Session state is not a mapping", FlowErrorCode.STATE_CORRUPTION, context)

        missing = [name for name in _STATE_FIELDS if name not in data]
        if missing:
            raise FlowError(
                f"Session state is missing fields: {', '.join(missing)}",
                FlowErrorCode.STATE_CORRUPTION,
                {**context, "missing": missing},
            )

        try:
            index = data["current_question_index"]
            if not isinstance(index, int) or isinstance(index, bool):
                raise TypeError("current_question_index must be an integer")
            current_id = data["current_question_id"]
            if current_id is not None and not isinstance(current_id, str):
                raise TypeError("current_question_id must be a string")
            is_completed = data["is_completed"]
            if not isinstance(is_completed, bool):
                raise TypeError("is_completed must be a boolean")

            responses = _decode_responses(data["responses"])
            history = _string_list("question_history", data["question_history"])
            if not history:
                raise ValueError("question_history must not be empty")
            if current_id is not None and history[-1] != current_id:
                raise ValueError("question_history must end with current_question_id")

            return cls(
                questionnaire_id=questionnaire_id,
                session_id=session_id,
                current_question_index=index,
                current_question_id=current_id,
                responses=responses,
                visited_questions=set(_string_list("visited_questions", data["visited_questions"])),
                skipped_questions=set(_string_list("skipped_questions", data["skipped_questions"])),
                question_history=history,
                is_completed=is_completed,
                start_time=datetime.fromisoformat(data["start_time"]),
                last_update_time=datetime.fromisoformat(data["last_update_time"]),
            )
        except (TypeError, ValueError) as exc:
            raise FlowError(
                f"Session state is malformed: {exc}", FlowErrorCode.STATE_CORRUPTION, context
            ) from exc
