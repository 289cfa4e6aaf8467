"""Records persisted by the storage collaborator."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, Field

SessionStatus = Literal["active", "completed", "abandoned"]
ResponseStatus = Literal["in_progress", "completed", "abandoned"]


def utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


class Answer(BaseModel):
    """A single recorded answer."""

    question_id: str
    value: Any = None
    answered_at: str = Field(default_factory=utc_now_iso)


class ResponseProgress(BaseModel):
    current_question_index: int = 0
    total_questions: int = 0
    answered_count: int = 0


class ResponseRecord(BaseModel):
    """Accumulated answers for one session, in the order they were given."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    questionnaire_id: str
    questionnaire_version: str = "1.0.0"
    session_id: str
    status: ResponseStatus = "in_progress"
    started_at: str = Field(default_factory=utc_now_iso)
    completed_at: str | None = None
    answers: list[Answer] = Field(default_factory=list)
    progress: ResponseProgress = Field(default_factory=ResponseProgress)


class SessionRecord(BaseModel):
    """Session bookkeeping plus the serialized flow state."""

    session_id: str
    questionnaire_id: str
    response_id: str
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)
    status: SessionStatus = "active"
    state: dict[str, Any] | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


__all__ = [
    "Answer",
    "ResponseProgress",
    "ResponseRecord",
    "ResponseStatus",
    "SessionRecord",
    "SessionStatus",
    "utc_now_iso",
]
