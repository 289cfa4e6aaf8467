"""
Centralized Redis key builder for questionnaire storage.

All Redis-backed storage goes through these helpers so questionnaires,
sessions and responses never collide across namespaces.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RedisKeyBuilder:
    """Builds namespaced Redis keys for the storage collaborator."""

    namespace: str = "questionflow"

    def questionnaire_key(self, questionnaire_id: str) -> str:
        return f"{self.namespace}:questionnaire:{questionnaire_id}"

    def session_key(self, session_id: str) -> str:
        return f"{self.namespace}:session:{session_id}"

    def response_key(self, session_id: str) -> str:
        """
        Build response key.

        Responses are keyed by the session that produced them, one response
        record per session.
        """
        return f"{self.namespace}:response:{session_id}"
