"""Questionnaire flow engine - stateful traversal over a linear questionnaire."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from questionflow.core.errors import FlowError, FlowErrorCode
from questionflow.core.records import Answer, utc_now_iso

from .conditional_logic import ConditionalLogicEngine
from .ir import Question, Questionnaire
from .progress import ProgressTracker
from .result_types import FlowComplete, FlowResult, ProgressInfo, QuestionResult
from .state import FlowState

if TYPE_CHECKING:
    from questionflow.core.storage import StorageService

logger = logging.getLogger(__name__)


class QuestionnaireFlowEngine:
    """
    Drives one flow session through a questionnaire.

    Key principles:
    1. Questions are visited in questionnaire order; conditional logic only
       decides which of them are skipped
    2. Every transition is persisted through the storage collaborator
    3. One engine drives one session at a time; callers serialize calls
    """

    def __init__(
        self,
        storage: StorageService,
        logic: ConditionalLogicEngine | None = None,
    ) -> None:
        self._storage = storage
        self._logic = logic or ConditionalLogicEngine()
        self._questionnaire: Questionnaire | None = None
        self._state: FlowState | None = None

    @property
    def questionnaire(self) -> Questionnaire | None:
        return self._questionnaire

    @property
    def state(self) -> FlowState | None:
        return self._state

    async def start(self, questionnaire_id: str) -> None:
        """Open a new session positioned on the first question."""
        questionnaire = await self._storage.load_questionnaire(questionnaire_id)
        if not questionnaire.questions:
            raise FlowError(
                "Questionnaire has no questions",
                FlowErrorCode.INVALID_NAVIGATION,
                {"questionnaire_id": questionnaire_id},
            )

        session_id = await self._storage.create_session(questionnaire_id)
        first = questionnaire.questions[0]

        self._questionnaire = questionnaire
        self._state = FlowState(
            questionnaire_id=questionnaire.id,
            session_id=session_id,
            current_question_index=0,
            current_question_id=first.id,
            question_history=[first.id],
        )
        logger.info("Started session %s for questionnaire %s", session_id, questionnaire.id)
        await self.save_state()

    async def next(self) -> FlowResult:
        """Advance to the next visible question, or complete the session."""
        questionnaire, state = self._ensure_navigable()

        current = self.get_current_question()
        if current is None:
            raise FlowError("No current question available", FlowErrorCode.NO_CURRENT_QUESTION)

        state.visited_questions.add(current.id)

        upcoming = self._find_next_visible_question(questionnaire, state)
        state.touch()

        if upcoming is None:
            state.is_completed = True
            await self._mark_response_completed(state)
            await self.save_state()
            logger.info("Session %s completed", state.session_id)
            return FlowComplete(responses=dict(state.responses))

        state.current_question_id = upcoming.id
        state.current_question_index = questionnaire.question_index(upcoming.id)
        state.question_history.append(upcoming.id)
        await self.save_state()
        return QuestionResult(question=upcoming)

    async def previous(self) -> Question | None:
        """Return to the question before the current one in history."""
        questionnaire, state = self._ensure_navigable()

        if len(state.question_history) <= 1:
            return None

        question = self._find_question(state.question_history[-2])
        if question is None:
            logger.warning(
                "History entry %s no longer resolves in session %s",
                state.question_history[-2],
                state.session_id,
            )
            return None

        state.question_history.pop()
        self._move_to(questionnaire, state, question)
        await self.save_state()
        return question

    async def jump_to(self, question_id: str) -> Question:
        """Make ``question_id`` current, pushing it onto history."""
        questionnaire, state = self._ensure_navigable()

        question = self._find_question(question_id)
        if question is None:
            raise FlowError(
                f"Question not found: {question_id}",
                FlowErrorCode.QUESTION_NOT_FOUND,
                {"question_id": question_id},
            )

        self._move_to(questionnaire, state, question)
        state.question_history.append(question.id)
        await self.save_state()
        return question

    def get_current_question(self) -> Question | None:
        if self._state is None or self._state.current_question_id is None:
            return None
        return self._find_question(self._state.current_question_id)

    def get_progress(self) -> ProgressInfo:
        questionnaire, state = self._ensure_loaded()
        return ProgressTracker.calculate_progress(
            len(questionnaire.questions),
            state.current_question_index,
            len(state.responses),
            state.is_completed,
        )

    async def record_response(self, question_id: str, answer: Any) -> None:
        """Store ``answer`` for ``question_id``, replacing any earlier answer."""
        _, state = self._ensure_loaded()

        if self._find_question(question_id) is None:
            raise FlowError(
                f"Question not found: {question_id}",
                FlowErrorCode.QUESTION_NOT_FOUND,
                {"question_id": question_id},
            )

        state.responses[question_id] = answer
        state.touch()

        response = await self._storage.load_response(state.session_id)
        response.answers.append(Answer(question_id=question_id, value=answer))
        response.progress.answered_count = len(state.responses)
        response.progress.current_question_index = state.current_question_index
        await self._storage.save_response(response)

        await self.save_state()

    async def save_state(self) -> None:
        """Persist the traversal state into the session record."""
        if self._state is None:
            return
        await self._storage.update_session(
            self._state.session_id,
            {
                "state": self._state.to_dict(),
                "status": "completed" if self._state.is_completed else "active",
            },
        )

    async def load_state(self, session_id: str) -> None:
        """Restore a session saved by ``save_state``.

        Raises:
            FlowError: ``STATE_CORRUPTION`` when the session carries no usable
                state or points at a question the questionnaire lacks.
        """
        session = await self._storage.load_session(session_id)
        questionnaire = await self._storage.load_questionnaire(session.questionnaire_id)

        if not session.state:
            raise FlowError(
                "Session has no state data",
                FlowErrorCode.STATE_CORRUPTION,
                {"session_id": session_id},
            )

        state = FlowState.from_dict(session.questionnaire_id, session_id, session.state)
        if (
            state.current_question_id is not None
            and questionnaire.question_by_id(state.current_question_id) is None
        ):
            raise FlowError(
                f"Saved question {state.current_question_id} is not in the questionnaire",
                FlowErrorCode.STATE_CORRUPTION,
                {"session_id": session_id},
            )

        self._questionnaire = questionnaire
        self._state = state
        logger.info("Loaded session %s at %s", session_id, state.current_question_id)

    def _find_next_visible_question(
        self, questionnaire: Questionnaire, state: FlowState
    ) -> Question | None:
        for question in questionnaire.questions[state.current_question_index + 1 :]:
            if self._is_question_visible(question, state):
                return question
            state.skipped_questions.add(question.id)
            logger.debug("Skipping question %s", question.id)
        return None

    def _is_question_visible(self, question: Question, state: FlowState) -> bool:
        if self._logic.should_skip_question(question, state.responses):
            return False
        return self._logic.should_show_question(question, state.responses)

    async def _mark_response_completed(self, state: FlowState) -> None:
        response = await self._storage.load_response(state.session_id)
        response.status = "completed"
        response.completed_at = utc_now_iso()
        response.progress.answered_count = len(state.responses)
        await self._storage.save_response(response)

    @staticmethod
    def _move_to(questionnaire: Questionnaire, state: FlowState, question: Question) -> None:
        state.current_question_id = question.id
        state.current_question_index = questionnaire.question_index(question.id)
        state.touch()

    def _find_question(self, question_id: str) -> Question | None:
        if self._questionnaire is None:
            return None
        return self._questionnaire.question_by_id(question_id)

    def _ensure_navigable(self) -> tuple[Questionnaire, FlowState]:
        questionnaire, state = self._ensure_loaded()
        if state.is_completed:
            raise FlowError(
                "Session is already completed",
                FlowErrorCode.INVALID_NAVIGATION,
                {"session_id": state.session_id},
            )
        return questionnaire, state

    def _ensure_loaded(self) -> tuple[Questionnaire, FlowState]:
        if self._questionnaire is None or self._state is None:
            raise FlowError(
                "Questionnaire not loaded. Call start() or load_state() first.",
                FlowErrorCode.QUESTIONNAIRE_NOT_LOADED,
            )
        return self._questionnaire, self._state
