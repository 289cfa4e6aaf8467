from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator


class ConditionOperator(str, Enum):
    """Closed set of comparison operators a condition may use."""

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    GREATER_THAN_OR_EQUAL = "greaterThanOrEqual"
    LESS_THAN_OR_EQUAL = "lessThanOrEqual"
    CONTAINS = "contains"
    NOT_CONTAINS = "notContains"
    IN = "in"
    NOT_IN = "notIn"
    MATCHES = "matches"
    NOT_MATCHES = "notMatches"
    IS_EMPTY = "isEmpty"
    IS_NOT_EMPTY = "isNotEmpty"
    HAS_LENGTH = "hasLength"
    HAS_MIN_LENGTH = "hasMinLength"
    HAS_MAX_LENGTH = "hasMaxLength"


class QuestionType(str, Enum):
    """Answer type of a question. Navigation never branches on it."""

    TEXT = "text"
    NUMBER = "number"
    EMAIL = "email"
    SINGLE_CHOICE = "single_choice"
    MULTIPLE_CHOICE = "multiple_choice"
    BOOLEAN = "boolean"
    DATE = "date"
    RATING = "rating"


class Condition(BaseModel):
    """Atomic comparison between a recorded answer and a literal."""

    model_config = {"populate_by_name": True}

    question_id: str = Field(alias="questionId")
    operator: ConditionOperator
    value: Any = None
    # Only read by the in/notIn operators
    values: list[Any] | None = None


ConditionGroup = Condition | list[Condition]


class Conditional(BaseModel):
    """Show/hide/skip/required rules attached to a question.

    A list in any slot is the logical AND of its members.
    """

    model_config = {"populate_by_name": True}

    show_if: ConditionGroup | None = Field(default=None, alias="showIf")
    hide_if: ConditionGroup | None = Field(default=None, alias="hideIf")
    skip_if: ConditionGroup | None = Field(default=None, alias="skipIf")
    required_if: ConditionGroup | None = Field(default=None, alias="requiredIf")

    def groups(self) -> list[ConditionGroup]:
        """Return the populated rule slots in show/hide/skip/required order."""
        return [
            group
            for group in (self.show_if, self.hide_if, self.skip_if, self.required_if)
            if group is not None
        ]


class Question(BaseModel):
    """Single step of a questionnaire."""

    id: str
    type: QuestionType = QuestionType.TEXT
    text: str = ""
    description: str | None = None
    required: bool = False
    options: list[str] = Field(default_factory=list)
    conditional: Conditional | None = None


class QuestionnaireMetadata(BaseModel):
    """Descriptive metadata about a questionnaire."""

    model_config = {"populate_by_name": True}

    title: str = ""
    description: str | None = None
    author: str | None = None
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")
    tags: list[str] = Field(default_factory=list)


class Questionnaire(BaseModel):
    """Ordered, immutable questionnaire definition.

    Question order defines traversal order and is the basis for the
    forward-reference warnings emitted during validation.
    """

    model_config = {"frozen": True}

    id: str
    version: str = "1.0.0"
    metadata: QuestionnaireMetadata = Field(default_factory=QuestionnaireMetadata)
    questions: list[Question] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_question_ids(self) -> Questionnaire:
        seen: set[str] = set()
        for question in self.questions:
            if question.id in seen:
                raise ValueError(f"Duplicate question ID: '{question.id}'")
            seen.add(question.id)
        return self

    def question_by_id(self, question_id: str) -> Question | None:
        """Get question by ID."""
        for q in self.questions:
            if q.id == question_id:
                return q
        return None

    def question_index(self, question_id: str) -> int:
        """Position of a question in traversal order, or -1 if absent."""
        for index, q in enumerate(self.questions):
            if q.id == question_id:
                return index
        return -1

    def question_ids(self) -> list[str]:
        return [q.id for q in self.questions]
