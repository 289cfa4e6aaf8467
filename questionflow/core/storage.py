"""Storage collaborator interface and implementations.

The flow engine only talks to ``StorageService``. ``InMemoryStorage`` serves
tests and single-process use; ``RedisStorage`` keeps JSON documents in Redis.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Protocol
from uuid import uuid4

import redis.asyncio as aioredis
from pydantic import ValidationError

from questionflow.core.errors import (
    QuestionnaireNotFoundError,
    ResponseNotFoundError,
    SessionNotFoundError,
)
from questionflow.core.records import ResponseProgress, ResponseRecord, SessionRecord, utc_now_iso
from questionflow.core.redis_keys import RedisKeyBuilder
from questionflow.flow_core.ir import Questionnaire

if TYPE_CHECKING:
    from questionflow.settings import Settings

logger = logging.getLogger(__name__)


class StorageService(Protocol):
    async def save_questionnaire(self, questionnaire: Questionnaire) -> None: ...

    async def load_questionnaire(self, questionnaire_id: str) -> Questionnaire: ...

    async def create_session(self, questionnaire_id: str) -> str: ...

    async def load_session(self, session_id: str) -> SessionRecord: ...

    async def update_session(self, session_id: str, data: dict[str, Any]) -> None: ...

    async def delete_session(self, session_id: str) -> None: ...

    async def save_response(self, response: ResponseRecord) -> None: ...

    async def load_response(self, session_id: str) -> ResponseRecord: ...


def _new_session(questionnaire: Questionnaire) -> tuple[SessionRecord, ResponseRecord]:
    """Build the session and its initial response, sharing one session id."""
    session_id = str(uuid4())
    response = ResponseRecord(
        questionnaire_id=questionnaire.id,
        questionnaire_version=questionnaire.version,
        session_id=session_id,
        progress=ResponseProgress(total_questions=len(questionnaire.questions)),
    )
    session = SessionRecord(
        session_id=session_id,
        questionnaire_id=questionnaire.id,
        response_id=response.id,
    )
    return session, response


def _merge_session(session: SessionRecord, data: dict[str, Any]) -> SessionRecord:
    payload = session.model_dump()
    payload.update(data)
    payload["session_id"] = session.session_id
    payload["updated_at"] = utc_now_iso()
    return SessionRecord.model_validate(payload)


class InMemoryStorage:
    """Dict-backed storage. Records are copied in and out so callers never alias them."""

    def __init__(self) -> None:
        self._questionnaires: dict[str, Questionnaire] = {}
        self._sessions: dict[str, SessionRecord] = {}
        self._responses: dict[str, ResponseRecord] = {}

    async def save_questionnaire(self, questionnaire: Questionnaire) -> None:
        self._questionnaires[questionnaire.id] = questionnaire

    async def load_questionnaire(self, questionnaire_id: str) -> Questionnaire:
        questionnaire = self._questionnaires.get(questionnaire_id)
        if questionnaire is None:
            raise QuestionnaireNotFoundError(f"Questionnaire {questionnaire_id} not found")
        return questionnaire

    async def create_session(self, questionnaire_id: str) -> str:
        questionnaire = await self.load_questionnaire(questionnaire_id)
        session, response = _new_session(questionnaire)
        self._responses[session.session_id] = response
        self._sessions[session.session_id] = session
        logger.debug("Created session %s for %s", session.session_id, questionnaire_id)
        return session.session_id

    async def load_session(self, session_id: str) -> SessionRecord:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session.model_copy(deep=True)

    async def update_session(self, session_id: str, data: dict[str, Any]) -> None:
        session = await self.load_session(session_id)
        self._sessions[session_id] = _merge_session(session, data)

    async def delete_session(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        self._responses.pop(session_id, None)

    async def save_response(self, response: ResponseRecord) -> None:
        self._responses[response.session_id] = response.model_copy(deep=True)

    async def load_response(self, session_id: str) -> ResponseRecord:
        response = self._responses.get(session_id)
        if response is None:
            raise ResponseNotFoundError(f"Response for session {session_id} not found")
        return response.model_copy(deep=True)


class RedisStorage:
    """Storage backed by Redis.

    Each questionnaire, session and response is a JSON document under a
    namespaced key. Sessions and responses expire after ``session_ttl`` when
    one is given; questionnaires never expire. A document that no longer
    validates is reported as not found.
    """

    def __init__(
        self,
        redis_url: str,
        *,
        namespace: str = "questionflow",
        session_ttl: timedelta | None = timedelta(days=30),
        client: Any | None = None,
    ) -> None:
        self._r = client if client is not None else aioredis.from_url(redis_url)
        self._keys = RedisKeyBuilder(namespace=namespace.rstrip(":"))
        self._session_ttl = int(session_ttl.total_seconds()) if session_ttl else None

    @property
    def redis_client(self) -> Any:
        """Public access to Redis client for advanced operations."""
        return self._r

    async def _write(self, key: str, body: str, ttl: int | None) -> None:
        if ttl:
            await self._r.setex(key, ttl, body)
        else:
            await self._r.set(key, body)

    async def save_questionnaire(self, questionnaire: Questionnaire) -> None:
        await self._write(
            self._keys.questionnaire_key(questionnaire.id), questionnaire.model_dump_json(), None
        )

    async def load_questionnaire(self, questionnaire_id: str) -> Questionnaire:
        raw = await self._r.get(self._keys.questionnaire_key(questionnaire_id))
        if not raw:
            raise QuestionnaireNotFoundError(f"Questionnaire {questionnaire_id} not found")
        try:
            return Questionnaire.model_validate_json(raw)
        except ValidationError as exc:
            raise QuestionnaireNotFoundError(
                f"Questionnaire {questionnaire_id} is invalid: {exc.error_count()} error(s)"
            ) from exc

    async def create_session(self, questionnaire_id: str) -> str:
        questionnaire = await self.load_questionnaire(questionnaire_id)
        session, response = _new_session(questionnaire)
        await self.save_response(response)
        await self._save_session(session)
        logger.debug("Created session %s for %s", session.session_id, questionnaire_id)
        return session.session_id

    async def _save_session(self, session: SessionRecord) -> None:
        await self._write(
            self._keys.session_key(session.session_id),
            session.model_dump_json(),
            self._session_ttl,
        )

    async def load_session(self, session_id: str) -> SessionRecord:
        raw = await self._r.get(self._keys.session_key(session_id))
        if not raw:
            raise SessionNotFoundError(f"Session {session_id} not found")
        try:
            return SessionRecord.model_validate_json(raw)
        except ValidationError as exc:
            raise SessionNotFoundError(f"Session {session_id} is invalid") from exc

    async def update_session(self, session_id: str, data: dict[str, Any]) -> None:
        session = await self.load_session(session_id)
        await self._save_session(_merge_session(session, data))

    async def delete_session(self, session_id: str) -> None:
        removed = await self._r.delete(self._keys.session_key(session_id))
        if not removed:
            raise SessionNotFoundError(f"Session {session_id} not found")
        await self._r.delete(self._keys.response_key(session_id))

    async def save_response(self, response: ResponseRecord) -> None:
        await self._write(
            self._keys.response_key(response.session_id),
            response.model_dump_json(),
            self._session_ttl,
        )

    async def load_response(self, session_id: str) -> ResponseRecord:
        raw = await self._r.get(self._keys.response_key(session_id))
        if not raw:
            raise ResponseNotFoundError(f"Response for session {session_id} not found")
        try:
            return ResponseRecord.model_validate_json(raw)
        except ValidationError as exc:
            raise ResponseNotFoundError(f"Response for session {session_id} is invalid") from exc


def create_storage(settings: Settings) -> StorageService:
    """Build the storage backend selected by ``STORAGE_BACKEND``."""
    if settings.storage_backend == "redis":
        redis_url = settings.redis_conn_url
        if not redis_url:
            raise ValueError("STORAGE_BACKEND=redis requires REDIS_URL or REDIS_HOST")
        ttl = timedelta(days=settings.session_ttl_days) if settings.session_ttl_days else None
        logger.info("Using Redis storage (namespace=%s)", settings.redis_namespace)
        return RedisStorage(redis_url, namespace=settings.redis_namespace, session_ttl=ttl)
    logger.info("Using in-memory storage")
    return InMemoryStorage()


__all__ = ["InMemoryStorage", "RedisStorage", "StorageService", "create_storage"]
