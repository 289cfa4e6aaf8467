from .conditional_logic import ConditionalLogicEngine, ValidationResult
from .conditions import OPERATORS, evaluate_condition
from .dependency_graph import DependencyGraph
from .engine import QuestionnaireFlowEngine
from .functions import BUILTIN_FUNCTIONS, ConditionalFunctionRegistry, EvaluationContext
from .ir import (
    Condition,
    ConditionGroup,
    Conditional,
    ConditionOperator,
    Question,
    Questionnaire,
    QuestionnaireMetadata,
    QuestionType,
)
from .navigation import NavigationManager
from .progress import ProgressTracker
from .result_types import (
    FlowComplete,
    FlowResult,
    NavigationAction,
    NavigationResult,
    ProgressInfo,
    QuestionResult,
)
from .state import FlowState

__all__ = [
    "BUILTIN_FUNCTIONS",
    "OPERATORS",
    "Condition",
    "ConditionGroup",
    "ConditionOperator",
    "Conditional",
    "ConditionalFunctionRegistry",
    "ConditionalLogicEngine",
    "DependencyGraph",
    "EvaluationContext",
    "FlowComplete",
    "FlowResult",
    "FlowState",
    "NavigationAction",
    "NavigationManager",
    "NavigationResult",
    "ProgressInfo",
    "ProgressTracker",
    "Question",
    "QuestionResult",
    "QuestionType",
    "Questionnaire",
    "QuestionnaireMetadata",
    "ValidationResult",
    "evaluate_condition",
]
