"""Registry of named functions for advanced conditional logic.

Functions read answers straight from the response snapshot in an
``EvaluationContext``. A registry is an ordinary object: construct one and hand
it to whatever needs it.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any

from .conditions import is_number, strict_equals

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EvaluationContext:
    """Inputs visible to a conditional function."""

    responses: Mapping[str, Any] = field(default_factory=dict)
    current_question_id: str | None = None


ConditionalFunction = Callable[[list[Any], EvaluationContext], Any]


def _require_args(name: str, args: list[Any], minimum: int, usage: str) -> None:
    if len(args) < minimum:
        raise ValueError(f"{name}() requires {usage}")


def _numeric_answers(args: list[Any], context: EvaluationContext) -> list[int | float]:
    values = (context.responses.get(question_id) for question_id in args)
    return [value for value in values if is_number(value)]


def fn_count(args: list[Any], context: EvaluationContext) -> int:
    """count(questionId, value): occurrences of value in an array answer."""
    _require_args("count", args, 2, "2 arguments: questionId and value")
    question_id, value = args[0], args[1]
    answer = context.responses.get(question_id)
    if not isinstance(answer, list | tuple):
        return 0
    return sum(1 for item in answer if strict_equals(item, value))


def fn_sum(args: list[Any], context: EvaluationContext) -> int | float:
    _require_args("sum", args, 1, "at least 1 argument")
    return sum(_numeric_answers(args, context))


def fn_avg(args: list[Any], context: EvaluationContext) -> float:
    _require_args("avg", args, 1, "at least 1 argument")
    values = _numeric_answers(args, context)
    if not values:
        return 0.0
    return sum(values) / len(values)


def fn_min(args: list[Any], context: EvaluationContext) -> int | float | None:
    _require_args("min", args, 1, "at least 1 argument")
    values = _numeric_answers(args, context)
    return min(values) if values else None


def fn_max(args: list[Any], context: EvaluationContext) -> int | float | None:
    _require_args("max", args, 1, "at least 1 argument")
    values = _numeric_answers(args, context)
    return max(values) if values else None


def fn_length(args: list[Any], context: EvaluationContext) -> int:
    _require_args("length", args, 1, "1 argument: questionId")
    answer = context.responses.get(args[0])
    if isinstance(answer, str | list | tuple):
        return len(answer)
    return 0


def _parse_date(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    # Date-only answers are midnight UTC
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def fn_days_ago(args: list[Any], context: EvaluationContext) -> int | None:
    """daysAgo(questionId): whole days between now and a date answer, rounded up."""
    _require_args("daysAgo", args, 1, "1 argument: questionId")
    answer = context.responses.get(args[0])
    if not answer:
        return None
    parsed = _parse_date(answer)
    if parsed is None:
        return None
    elapsed = abs((datetime.now(UTC) - parsed).total_seconds())
    return math.ceil(elapsed / 86400)


def fn_answered_count(args: list[Any], context: EvaluationContext) -> int:
    _require_args("answeredCount", args, 1, "at least 1 argument")
    return sum(
        1 for question_id in args if context.responses.get(question_id) not in (None, "")
    )


BUILTIN_FUNCTIONS: dict[str, ConditionalFunction] = {
    "count": fn_count,
    "sum": fn_sum,
    "avg": fn_avg,
    "min": fn_min,
    "max": fn_max,
    "length": fn_length,
    "daysAgo": fn_days_ago,
    "answeredCount": fn_answered_count,
}


class ConditionalFunctionRegistry:
    """Named functions available to advanced conditionals and extensions."""

    def __init__(self, *, include_builtins: bool = True) -> None:
        self._functions: dict[str, ConditionalFunction] = {}
        if include_builtins:
            for name, func in BUILTIN_FUNCTIONS.items():
                self.register(name, func)

    def register(self, name: str, func: ConditionalFunction) -> None:
        """Register a function, replacing any existing one with the same name."""
        if name in self._functions:
            logger.debug("Overwriting conditional function: %s", name)
        self._functions[name] = func

    def execute(self, name: str, args: list[Any], context: EvaluationContext) -> Any:
        """Run a registered function.

        Raises:
            ValueError: If no function is registered under ``name`` or the
                arguments are insufficient.
        """
        func = self._functions.get(name)
        if func is None:
            raise ValueError(f"Unknown function: {name}")
        return func(list(args), context)

    def has(self, name: str) -> bool:
        return name in self._functions

    def list_functions(self) -> list[str]:
        return list(self._functions.keys())


__all__ = [
    "BUILTIN_FUNCTIONS",
    "ConditionalFunction",
    "ConditionalFunctionRegistry",
    "EvaluationContext",
]
