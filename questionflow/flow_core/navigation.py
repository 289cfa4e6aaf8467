"""Navigation manager: maps presentation-layer actions onto the flow engine."""

from __future__ import annotations

import logging

from questionflow.core.errors import QuestionFlowError
from questionflow.core.logging import session_log_context

from .engine import QuestionnaireFlowEngine
from .result_types import NavigationAction, NavigationResult, QuestionResult

logger = logging.getLogger(__name__)


class NavigationManager:
    """Handles navigation actions for one flow engine.

    Library errors are reported in the returned ``NavigationResult`` so the
    presentation layer can show them; anything else propagates.
    """

    def __init__(self, flow_engine: QuestionnaireFlowEngine) -> None:
        self.flow_engine = flow_engine

    async def handle_navigation(self, action: NavigationAction) -> NavigationResult:
        state = self.flow_engine.state
        with session_log_context(state.session_id if state else None):
            try:
                return await self._dispatch(action)
            except QuestionFlowError as exc:
                logger.warning("Navigation action %s failed: %s", action.type, exc)
                return NavigationResult(success=False, error=str(exc))

    async def _dispatch(self, action: NavigationAction) -> NavigationResult:
        if action.type == "next":
            return await self._handle_next(action)
        if action.type == "previous":
            return await self._handle_previous()
        if action.type == "skip":
            return NavigationResult(success=True, result=await self.flow_engine.next())
        if action.type == "jumpTo":
            return await self._handle_jump_to(action.question_id)
        if action.type == "exit":
            await self.flow_engine.save_state()
            return NavigationResult(success=True)
        return NavigationResult(success=False, error=f"Unknown navigation action: {action.type}")

    async def _handle_next(self, action: NavigationAction) -> NavigationResult:
        current = self.flow_engine.get_current_question()
        if current is None:
            return NavigationResult(success=False, error="No current question")

        if action.answer is not None:
            await self.flow_engine.record_response(current.id, action.answer)

        return NavigationResult(success=True, result=await self.flow_engine.next())

    async def _handle_previous(self) -> NavigationResult:
        question = await self.flow_engine.previous()
        if question is None:
            return NavigationResult(success=False, error="Already at the first question")
        return NavigationResult(success=True, result=QuestionResult(question=question))

    async def _handle_jump_to(self, question_id: str | None) -> NavigationResult:
        if not question_id:
            return NavigationResult(success=False, error="Question ID is required for jumpTo action")
        question = await self.flow_engine.jump_to(question_id)
        return NavigationResult(success=True, result=QuestionResult(question=question))
