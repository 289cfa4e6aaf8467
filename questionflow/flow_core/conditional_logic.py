"""Conditional logic coordinator: visibility decisions and structural validation."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .conditions import evaluate_condition
from .dependency_graph import DependencyGraph
from .functions import ConditionalFunctionRegistry, EvaluationContext
from .ir import Condition, ConditionGroup, Conditional, Question, Questionnaire

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ValidationResult:
    """Outcome of validating a questionnaire's conditional logic."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _flatten(group: ConditionGroup) -> list[Condition]:
    return list(group) if isinstance(group, list) else [group]


class ConditionalLogicEngine:
    """Combines atomic conditions into show/hide/skip/required decisions."""

    def __init__(self, functions: ConditionalFunctionRegistry | None = None) -> None:
        # Named functions for advanced conditionals and custom extensions
        self.functions = functions if functions is not None else ConditionalFunctionRegistry()

    def execute_function(
        self,
        name: str,
        args: list[Any],
        responses: Mapping[str, Any],
        current_question_id: str | None = None,
    ) -> Any:
        """Run a registered conditional function against a response snapshot."""
        context = EvaluationContext(responses=responses, current_question_id=current_question_id)
        return self.functions.execute(name, args, context)

    def evaluate_condition(self, condition: Condition, responses: Mapping[str, Any]) -> bool:
        return evaluate_condition(condition, responses)

    def evaluate_condition_group(
        self, conditions: ConditionGroup, responses: Mapping[str, Any]
    ) -> bool:
        """Evaluate a single condition or the AND of a list, left to right."""
        if not isinstance(conditions, list):
            return evaluate_condition(conditions, responses)
        return all(evaluate_condition(condition, responses) for condition in conditions)

    def should_show_question(self, question: Question, responses: Mapping[str, Any]) -> bool:
        logic = question.conditional
        if logic is None:
            return True

        if logic.show_if is not None and not self.evaluate_condition_group(
            logic.show_if, responses
        ):
            return False

        # hideIf wins over showIf
        if logic.hide_if is not None and self.evaluate_condition_group(logic.hide_if, responses):
            return False

        return True

    def should_skip_question(self, question: Question, responses: Mapping[str, Any]) -> bool:
        logic = question.conditional
        if logic is None or logic.skip_if is None:
            return False
        return self.evaluate_condition_group(logic.skip_if, responses)

    def is_question_required(self, question: Question, responses: Mapping[str, Any]) -> bool:
        if question.required:
            return True
        logic = question.conditional
        if logic is not None and logic.required_if is not None:
            return self.evaluate_condition_group(logic.required_if, responses)
        return False

    def extract_dependencies(self, conditional: Conditional) -> set[str]:
        """Question ids referenced anywhere in a conditional block."""
        return {
            condition.question_id
            for group in conditional.groups()
            for condition in _flatten(group)
        }

    def build_dependency_graph(self, questionnaire: Questionnaire) -> DependencyGraph:
        graph = DependencyGraph()
        for question in questionnaire.questions:
            if question.conditional is None:
                continue
            for dependency in sorted(self.extract_dependencies(question.conditional)):
                graph.add_dependency(question.id, dependency)
        return graph

    def validate_conditional_logic(self, questionnaire: Questionnaire) -> ValidationResult:
        """Report every structural problem in the questionnaire's conditional logic.

        Never raises. Errors cover circular dependencies, references to
        questions that do not exist, and self-references. Warnings flag
        questions whose ``showIf`` reads a later question and may therefore be
        unreachable in a linear traversal.
        """
        result = ValidationResult()
        graph = self.build_dependency_graph(questionnaire)

        for cycle in graph.find_cycles():
            result.errors.append(f"Circular dependency detected: {' -> '.join(cycle)}")

        positions = {q.id: index for index, q in enumerate(questionnaire.questions)}

        for index, question in enumerate(questionnaire.questions):
            if question.conditional is None:
                continue
            dependencies = sorted(self.extract_dependencies(question.conditional))

            for dependency in dependencies:
                if dependency == question.id:
                    result.errors.append(f"Question '{question.id}' cannot depend on itself")
                elif dependency not in positions:
                    result.errors.append(
                        f"Question '{question.id}' references non-existent question '{dependency}'"
                    )

            show_if = question.conditional.show_if
            if show_if is not None and any(
                positions.get(condition.question_id, -1) > index
                for condition in _flatten(show_if)
            ):
                result.warnings.append(
                    f"Question '{question.id}' may be unreachable: its showIf depends on a "
                    "question that appears later"
                )

        if result.errors:
            logger.warning(
                "Conditional logic validation failed for %s: %d error(s)",
                questionnaire.id,
                len(result.errors),
            )
        return result


__all__ = ["ConditionalLogicEngine", "ValidationResult"]
