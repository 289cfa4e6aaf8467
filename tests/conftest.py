import os
import sys
from typing import Any

import pytest

# Ensure the project root (containing the `questionflow` package) is importable
_TESTS_DIR = os.path.dirname(__file__)
_PROJECT_ROOT = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from questionflow.core.storage import InMemoryStorage  # noqa: E402
from questionflow.flow_core.ir import Questionnaire  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: Fast unit tests with mocks only")


def make_questionnaire(questions: list[dict[str, Any]], qid: str = "survey") -> Questionnaire:
    """Build a questionnaire from camelCase question dicts."""
    return Questionnaire.model_validate(
        {"id": qid, "metadata": {"title": "Test survey"}, "questions": questions}
    )


@pytest.fixture
def build_questionnaire():
    return make_questionnaire


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def branching_questionnaire() -> Questionnaire:
    """q2 is only shown when q1 is true; q3 is always shown."""
    return make_questionnaire(
        [
            {"id": "q1", "type": "boolean", "text": "Do you own a car?"},
            {
                "id": "q2",
                "type": "text",
                "text": "Which model?",
                "conditional": {
                    "showIf": {"questionId": "q1", "operator": "equals", "value": True}
                },
            },
            {"id": "q3", "type": "number", "text": "How old are you?"},
        ]
    )
