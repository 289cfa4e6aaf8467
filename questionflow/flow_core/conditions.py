"""Condition evaluation against a response snapshot.

Each operator is a small pure function ``(response, condition) -> bool`` and the
evaluator dispatches through ``OPERATORS``. Type mismatches never raise: numeric
and length comparisons on the wrong types are simply false.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import Any

from questionflow.core.errors import ConditionEvaluationError

from .ir import Condition, ConditionOperator

OperatorFunction = Callable[[Any, Condition], bool]


def is_number(value: Any) -> bool:
    """True for int/float values. Booleans are not numbers here."""
    return isinstance(value, int | float) and not isinstance(value, bool)


def is_array(value: Any) -> bool:
    return isinstance(value, list | tuple)


def strict_equals(left: Any, right: Any) -> bool:
    """Equality without coercion between bools, numbers and strings."""
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if is_number(left) and is_number(right):
        return left == right
    if is_number(left) or is_number(right):
        return False
    if is_array(left) and is_array(right):
        return len(left) == len(right) and all(
            strict_equals(a, b) for a, b in zip(left, right, strict=True)
        )
    return type(left) is type(right) and left == right


def _includes(items: Any, value: Any) -> bool:
    return any(strict_equals(item, value) for item in items)


def _is_empty(response: Any) -> bool:
    return response is None or response == "" or (is_array(response) and len(response) == 0)


def _search(pattern: str, text: str, condition: Condition) -> bool:
    try:
        return re.search(pattern, text) is not None
    except re.error as exc:
        raise ConditionEvaluationError(
            f"Invalid regular expression '{pattern}': {exc}", condition
        ) from exc


def op_equals(response: Any, condition: Condition) -> bool:
    return strict_equals(response, condition.value)


def op_not_equals(response: Any, condition: Condition) -> bool:
    return not strict_equals(response, condition.value)


def op_greater_than(response: Any, condition: Condition) -> bool:
    return is_number(response) and is_number(condition.value) and response > condition.value


def op_less_than(response: Any, condition: Condition) -> bool:
    return is_number(response) and is_number(condition.value) and response < condition.value


def op_greater_than_or_equal(response: Any, condition: Condition) -> bool:
    return is_number(response) and is_number(condition.value) and response >= condition.value


def op_less_than_or_equal(response: Any, condition: Condition) -> bool:
    return is_number(response) and is_number(condition.value) and response <= condition.value


def op_contains(response: Any, condition: Condition) -> bool:
    return is_array(response) and _includes(response, condition.value)


def op_not_contains(response: Any, condition: Condition) -> bool:
    return not is_array(response) or not _includes(response, condition.value)


def op_in(response: Any, condition: Condition) -> bool:
    return is_array(condition.values) and _includes(condition.values, response)


def op_not_in(response: Any, condition: Condition) -> bool:
    return not is_array(condition.values) or not _includes(condition.values, response)


def op_matches(response: Any, condition: Condition) -> bool:
    if not isinstance(response, str) or not isinstance(condition.value, str):
        return False
    return _search(condition.value, response, condition)


def op_not_matches(response: Any, condition: Condition) -> bool:
    if not isinstance(response, str) or not isinstance(condition.value, str):
        return True
    return not _search(condition.value, response, condition)


def op_is_empty(response: Any, _condition: Condition) -> bool:
    return _is_empty(response)


def op_is_not_empty(response: Any, _condition: Condition) -> bool:
    return not _is_empty(response)


def _has_measurable_length(response: Any, condition: Condition) -> bool:
    return (isinstance(response, str) or is_array(response)) and is_number(condition.value)


def op_has_length(response: Any, condition: Condition) -> bool:
    return _has_measurable_length(response, condition) and len(response) == condition.value


def op_has_min_length(response: Any, condition: Condition) -> bool:
    return _has_measurable_length(response, condition) and len(response) >= condition.value


def op_has_max_length(response: Any, condition: Condition) -> bool:
    return _has_measurable_length(response, condition) and len(response) <= condition.value


OPERATORS: dict[ConditionOperator, OperatorFunction] = {
    ConditionOperator.EQUALS: op_equals,
    ConditionOperator.NOT_EQUALS: op_not_equals,
    ConditionOperator.GREATER_THAN: op_greater_than,
    ConditionOperator.LESS_THAN: op_less_than,
    ConditionOperator.GREATER_THAN_OR_EQUAL: op_greater_than_or_equal,
    ConditionOperator.LESS_THAN_OR_EQUAL: op_less_than_or_equal,
    ConditionOperator.CONTAINS: op_contains,
    ConditionOperator.NOT_CONTAINS: op_not_contains,
    ConditionOperator.IN: op_in,
    ConditionOperator.NOT_IN: op_not_in,
    ConditionOperator.MATCHES: op_matches,
    ConditionOperator.NOT_MATCHES: op_not_matches,
    ConditionOperator.IS_EMPTY: op_is_empty,
    ConditionOperator.IS_NOT_EMPTY: op_is_not_empty,
    ConditionOperator.HAS_LENGTH: op_has_length,
    ConditionOperator.HAS_MIN_LENGTH: op_has_min_length,
    ConditionOperator.HAS_MAX_LENGTH: op_has_max_length,
}


def evaluate_condition(condition: Condition, responses: Mapping[str, Any]) -> bool:
    """Evaluate one condition against the recorded responses.

    Raises:
        ConditionEvaluationError: If the operator is not recognised or the
            condition's regular expression cannot be compiled.
    """
    try:
        operator = ConditionOperator(condition.operator)
    except ValueError as exc:
        raise ConditionEvaluationError(
            f"Unknown condition operator: {condition.operator}", condition
        ) from exc

    handler = OPERATORS.get(operator)
    if handler is None:
        raise ConditionEvaluationError(f"Unknown condition operator: {operator.value}", condition)

    return handler(responses.get(condition.question_id), condition)


__all__ = ["OPERATORS", "OperatorFunction", "evaluate_condition", "is_number", "strict_equals"]
