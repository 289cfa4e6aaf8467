import pytest
import pytest_asyncio

from questionflow.core.logging import session_id_ctx_var
from questionflow.flow_core.engine import QuestionnaireFlowEngine
from questionflow.flow_core.navigation import NavigationManager
from questionflow.flow_core.result_types import FlowComplete, NavigationAction, QuestionResult


@pytest_asyncio.fixture
async def manager(storage, branching_questionnaire) -> NavigationManager:
    await storage.save_questionnaire(branching_questionnaire)
    engine = QuestionnaireFlowEngine(storage)
    await engine.start("survey")
    return NavigationManager(engine)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_next_records_answer_and_advances(manager):
    result = await manager.handle_navigation(NavigationAction(type="next", answer=True))

    assert result.success is True
    assert isinstance(result.result, QuestionResult)
    assert result.result.question.id == "q2"
    assert manager.flow_engine.state.responses == {"q1": True}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_next_without_answer_does_not_record(manager):
    result = await manager.handle_navigation(NavigationAction(type="next"))

    assert result.success is True
    # q1 unanswered, so q2's showIf is false
    assert result.result.question.id == "q3"
    assert manager.flow_engine.state.responses == {}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_skip_advances_without_recording(manager):
    result = await manager.handle_navigation(NavigationAction(type="skip", answer="ignored"))

    assert result.success is True
    assert manager.flow_engine.state.responses == {}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_previous_at_first_question_fails_softly(manager):
    result = await manager.handle_navigation(NavigationAction(type="previous"))

    assert result.success is False
    assert result.error == "Already at the first question"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_previous_after_next(manager):
    await manager.handle_navigation(NavigationAction(type="next", answer=True))
    result = await manager.handle_navigation(NavigationAction(type="previous"))

    assert result.success is True
    assert result.result.question.id == "q1"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_jump_to_requires_question_id(manager):
    result = await manager.handle_navigation(NavigationAction(type="jumpTo"))

    assert result.success is False
    assert result.error == "Question ID is required for jumpTo action"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_jump_to_unknown_question_reports_error(manager):
    result = await manager.handle_navigation(NavigationAction(type="jumpTo", question_id="zzz"))

    assert result.success is False
    assert "QUESTION_NOT_FOUND" in result.error


@pytest.mark.unit
@pytest.mark.asyncio
async def test_jump_to_known_question(manager):
    result = await manager.handle_navigation(NavigationAction(type="jumpTo", question_id="q3"))

    assert result.success is True
    assert result.result.question.id == "q3"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_exit_persists_state(manager, storage):
    await manager.flow_engine.record_response("q1", False)
    result = await manager.handle_navigation(NavigationAction(type="exit"))

    assert result.success is True
    assert result.result is None
    session = await storage.load_session(manager.flow_engine.state.session_id)
    assert session.state["responses"] == [["q1", False]]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_full_walk_to_completion(manager):
    await manager.handle_navigation(NavigationAction(type="next", answer=False))
    result = await manager.handle_navigation(NavigationAction(type="next", answer=41))

    assert isinstance(result.result, FlowComplete)
    assert result.result.responses == {"q1": False, "q3": 41}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unloaded_engine_reports_error(storage):
    manager = NavigationManager(QuestionnaireFlowEngine(storage))

    result = await manager.handle_navigation(NavigationAction(type="skip"))

    assert result.success is False
    assert "QUESTIONNAIRE_NOT_LOADED" in result.error


@pytest.mark.unit
@pytest.mark.asyncio
async def test_session_id_is_bound_while_handling(manager, monkeypatch):
    seen: list[str | None] = []
    original_next = manager.flow_engine.next

    async def spy_next():
        seen.append(session_id_ctx_var.get())
        return await original_next()

    monkeypatch.setattr(manager.flow_engine, "next", spy_next)
    await manager.handle_navigation(NavigationAction(type="skip"))

    assert seen == [manager.flow_engine.state.session_id]
    assert session_id_ctx_var.get() is None
