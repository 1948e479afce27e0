from __future__ import annotations

from datetime import datetime
from typing import Any

from app.application.ports.session_store import SessionStorePort
from app.domain.entities.conversation_state import ConversationState


class MemorySessionStore(SessionStorePort):
    def __init__(self, history_limit: int = 30, processed_limit: int = 200) -> None:
        self._states: dict[str, ConversationState] = {}
        self._threads: dict[str, list[dict[str, Any]]] = {}
        self._processed: dict[str, list[str]] = {}
        self._history_limit = history_limit
        self._processed_limit = processed_limit

    def get(self, identifier: str) -> ConversationState | None:
        return self._states.get(identifier)

    def put(self, identifier: str, state: ConversationState) -> None:
        self._states[identifier] = state

    def append_message(self, identifier: str, sender: str, text: str, meta: dict[str, Any] | None = None) -> None:
        self._threads.setdefault(identifier, [])
        self._threads[identifier].append(
            {
                "sender": sender,
                "text": text,
                "ts": datetime.now().timestamp(),
                "meta": dict(meta or {}),
            }
        )
        if len(self._threads[identifier]) > self._history_limit:
            self._threads[identifier] = self._threads[identifier][-self._history_limit :]

    def get_history(self, identifier: str) -> list[dict[str, Any]]:
        return list(self._threads.get(identifier, []))

    def has_processed(self, identifier: str, message_id: str) -> bool:
        return message_id in self._processed.get(identifier, [])

    def mark_processed(self, identifier: str, message_id: str) -> None:
        processed = self._processed.setdefault(identifier, [])
        processed.append(message_id)
        if len(processed) > self._processed_limit:
            self._processed[identifier] = processed[-self._processed_limit :]
