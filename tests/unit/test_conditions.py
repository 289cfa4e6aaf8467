import pytest

from questionflow.core.errors import ConditionEvaluationError
from questionflow.flow_core.conditions import OPERATORS, evaluate_condition, strict_equals
from questionflow.flow_core.ir import Condition, ConditionOperator


def cond(operator: str, value=None, values=None, question_id: str = "q1") -> Condition:
    return Condition(questionId=question_id, operator=operator, value=value, values=values)


@pytest.mark.unit
def test_every_operator_has_a_handler():
    assert set(OPERATORS) == set(ConditionOperator)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("operator", "response", "value", "expected"),
    [
        ("equals", "yes", "yes", True),
        ("equals", 1, "1", False),
        ("equals", True, 1, False),
        ("equals", ["a", "b"], ["a", "b"], True),
        ("notEquals", "yes", "no", True),
        ("notEquals", 5, 5, False),
        ("greaterThan", 10, 5, True),
        ("greaterThan", "10", 5, False),
        ("lessThan", 3, 5, True),
        ("lessThan", None, 5, False),
        ("greaterThanOrEqual", 5, 5, True),
        ("lessThanOrEqual", 6, 5, False),
        ("contains", ["red", "blue"], "red", True),
        ("contains", "red", "red", False),
        ("notContains", ["red"], "blue", True),
        ("notContains", "not a list", "x", True),
        ("matches", "abc123", r"\d+", True),
        ("matches", 123, r"\d+", False),
        ("notMatches", "abc", r"\d+", True),
        ("notMatches", 42, r"\d+", True),
        ("hasLength", "abc", 3, True),
        ("hasLength", ["a"], 2, False),
        ("hasMinLength", [1, 2, 3], 2, True),
        ("hasMaxLength", "abcdef", 3, False),
        ("hasMaxLength", 12345, 3, False),
    ],
)
def test_operator_semantics(operator, response, value, expected):
    assert evaluate_condition(cond(operator, value), {"q1": response}) is expected


@pytest.mark.unit
def test_in_and_not_in_use_values_list():
    responses = {"q1": "b"}
    assert evaluate_condition(cond("in", values=["a", "b"]), responses) is True
    assert evaluate_condition(cond("notIn", values=["a", "b"]), responses) is False
    # Missing values list
    assert evaluate_condition(cond("in"), responses) is False
    assert evaluate_condition(cond("notIn"), responses) is True


@pytest.mark.unit
@pytest.mark.parametrize("response", [None, "", []])
def test_is_empty_for_missing_or_blank_answers(response):
    responses = {} if response is None else {"q1": response}
    assert evaluate_condition(cond("isEmpty"), responses) is True
    assert evaluate_condition(cond("isNotEmpty"), responses) is False


@pytest.mark.unit
@pytest.mark.parametrize("response", [0, False, "x", [0]])
def test_zero_and_false_are_not_empty(response):
    assert evaluate_condition(cond("isNotEmpty"), {"q1": response}) is True


@pytest.mark.unit
def test_missing_answer_is_not_an_error_for_comparisons():
    assert evaluate_condition(cond("greaterThan", 1), {}) is False
    assert evaluate_condition(cond("equals", None), {}) is True


@pytest.mark.unit
def test_invalid_regex_raises_condition_error():
    condition = cond("matches", "([unclosed")
    with pytest.raises(ConditionEvaluationError) as exc_info:
        evaluate_condition(condition, {"q1": "text"})
    assert exc_info.value.condition is condition


@pytest.mark.unit
def test_unknown_operator_raises_condition_error():
    condition = Condition.model_construct(question_id="q1", operator="bogus", value=1, values=None)
    with pytest.raises(ConditionEvaluationError, match="Unknown condition operator: bogus"):
        evaluate_condition(condition, {"q1": 1})


@pytest.mark.unit
def test_strict_equals_does_not_coerce():
    assert strict_equals(1, 1.0) is True
    assert strict_equals(0, False) is False
    assert strict_equals("1", 1) is False
    assert strict_equals(None, None) is True
    assert strict_equals([1, [2]], [1, [2]]) is True
