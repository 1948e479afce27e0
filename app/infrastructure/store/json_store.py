from __future__ import annotations

import json
import re
from datetime import datetime
from pathlib import Path
from typing import Any

from app.application.ports.session_store import SessionStorePort
from app.application.utils.keyed_lock import KeyedLock
from app.domain.entities.catalog_item import BookingKind, CatalogItem
from app.domain.entities.conversation_state import ConversationState, Phase
from app.domain.entities.selection_state import SelectionState


class JsonSessionStore(SessionStorePort):
    """One JSON file per user identifier, written atomically."""

    def __init__(self, data_dir: str = "./data/sessions", history_limit: int = 50, processed_limit: int = 200) -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._history_limit = history_limit
        self._processed_limit = processed_limit
        self._locks = KeyedLock()

    def _get_file_path(self, identifier: str) -> Path:
        safe_name = re.sub(r"[^A-Za-z0-9_-]", "_", identifier)
        return self._data_dir / f"{safe_name}.json"

    def _empty_session(self, identifier: str) -> dict[str, Any]:
        return {
            "identifier": identifier,
            "state": None,
            "messages": [],
            "processed_message_ids": [],
            "version": 1,
        }

    def _load_session_data(self, identifier: str) -> dict[str, Any]:
        """Load session data from JSON file, return default if missing."""
        file_path = self._get_file_path(identifier)
        if not file_path.exists():
            return self._empty_session(identifier)

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError):
            # A corrupted file starts the conversation over
            return self._empty_session(identifier)

        data.setdefault("messages", [])
        data.setdefault("processed_message_ids", [])
        data.setdefault("version", 1)
        return data

    def _save_session_data(self, identifier: str, data: dict[str, Any]) -> None:
        """Save session data to JSON file atomically."""
        file_path = self._get_file_path(identifier)
        temp_path = file_path.with_suffix(".json.tmp")

        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(file_path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise

    def _serialize_state(self, state: ConversationState) -> dict[str, Any]:
        return {
            "identifier": state.identifier,
            "phase": state.phase.value,
            "selection": self._serialize_selection(state.selection),
            "last_interaction": state.last_interaction,
        }

    def _deserialize_state(self, identifier: str, data: dict[str, Any]) -> ConversationState:
        try:
            phase = Phase(data.get("phase", Phase.NEW.value))
        except ValueError:
            phase = Phase.NEW

        return ConversationState(
            identifier=data.get("identifier") or identifier,
            phase=phase,
            selection=self._deserialize_selection(data.get("selection") or {}),
            last_interaction=data.get("last_interaction"),
        )

    def _serialize_selection(self, selection: SelectionState) -> dict[str, Any]:
        return {
            "kind": selection.kind.value if selection.kind else None,
            "category_options": list(selection.category_options),
            "category": selection.category,
            "candidates": [self._serialize_item(item) for item in selection.candidates],
            "chosen_item_id": selection.chosen_item_id,
        }

    def _deserialize_selection(self, data: dict[str, Any]) -> SelectionState:
        kind = None
        if data.get("kind"):
            try:
                kind = BookingKind(data["kind"])
            except ValueError:
                kind = None

        return SelectionState(
            kind=kind,
            category_options=tuple(data.get("category_options") or ()),
            category=data.get("category"),
            candidates=tuple(self._deserialize_item(item) for item in data.get("candidates") or ()),
            chosen_item_id=data.get("chosen_item_id"),
        )

    def _serialize_item(self, item: CatalogItem) -> dict[str, Any]:
        return {
            "id": item.id,
            "display_name": item.display_name,
            "kind": item.kind.value,
            "category": item.category,
            "location": item.location,
            "capacity": item.capacity,
            "price": item.price,
            "images": list(item.images),
        }

    def _deserialize_item(self, data: dict[str, Any]) -> CatalogItem:
        return CatalogItem(
            id=str(data["id"]),
            display_name=data.get("display_name", ""),
            kind=BookingKind(data.get("kind", BookingKind.VENUE.value)),
            category=data.get("category", ""),
            location=data.get("location"),
            capacity=data.get("capacity"),
            price=data.get("price"),
            images=tuple(data.get("images") or ()),
        )

    def get(self, identifier: str) -> ConversationState | None:
        with self._locks.hold(identifier):
            data = self._load_session_data(identifier)
            if not data.get("state"):
                return None
            return self._deserialize_state(identifier, data["state"])

    def put(self, identifier: str, state: ConversationState) -> None:
        with self._locks.hold(identifier):
            data = self._load_session_data(identifier)
            data["state"] = self._serialize_state(state)
            self._save_session_data(identifier, data)

    def append_message(self, identifier: str, sender: str, text: str, meta: dict[str, Any] | None = None) -> None:
        with self._locks.hold(identifier):
            data = self._load_session_data(identifier)
            messages = data["messages"]
            messages.append(
                {
                    "sender": sender,
                    "text": text,
                    "ts": datetime.now().timestamp(),
                    "meta": dict(meta or {}),
                }
            )

            # Keep last N messages
            data["messages"] = messages[-self._history_limit :]
            self._save_session_data(identifier, data)

    def get_history(self, identifier: str) -> list[dict[str, Any]]:
        with self._locks.hold(identifier):
            return self._load_session_data(identifier)["messages"]

    def has_processed(self, identifier: str, message_id: str) -> bool:
        with self._locks.hold(identifier):
            return message_id in self._load_session_data(identifier)["processed_message_ids"]

    def mark_processed(self, identifier: str, message_id: str) -> None:
        with self._locks.hold(identifier):
            data = self._load_session_data(identifier)
            processed = data["processed_message_ids"]
            processed.append(message_id)
            data["processed_message_ids"] = processed[-self._processed_limit :]
            self._save_session_data(identifier, data)
