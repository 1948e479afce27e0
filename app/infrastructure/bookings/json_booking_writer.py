from __future__ import annotations

import json
import logging
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any

from app.application.ports.booking_writer import BookingWriterPort
from app.domain.entities.booking import BookingDraft, BookingRecord, BookingStatus, booking_key
from app.domain.entities.catalog_item import BookingKind
from app.infrastructure.bookings.memory_booking_writer import new_booking_id


class JsonBookingWriter(BookingWriterPort):
    """Bookings kept in a single JSON file, rewritten atomically on every change."""

    def __init__(self, data_dir: str = "./data") -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._file_path = self._data_dir / "bookings.json"
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def _load(self) -> list[dict[str, Any]]:
        if not self._file_path.exists():
            return []
        with open(self._file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return data.get("bookings", [])

    def _save(self, bookings: list[dict[str, Any]]) -> None:
        temp_path = self._file_path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump({"bookings": bookings, "version": 1}, f, indent=2, ensure_ascii=False)
            temp_path.replace(self._file_path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise

    def create_booking(self, draft: BookingDraft) -> str:
        with self._lock:
            bookings = self._load()
            for entry in bookings:
                if entry.get("status") == BookingStatus.PENDING.value and _entry_key(entry) == draft.dedupe_key:
                    self._logger.info(
                        "Booking already pending, reusing it",
                        extra={"booking_id": entry["booking_id"], "identifier": draft.user_identifier},
                    )
                    return entry["booking_id"]

            booking_id = new_booking_id()
            bookings.append(
                {
                    "booking_id": booking_id,
                    "user_identifier": draft.user_identifier,
                    "kind": draft.kind.value,
                    "item_id": draft.item_id,
                    "date": draft.date.isoformat(),
                    "status": draft.status.value,
                    "created_at": datetime.now().timestamp(),
                }
            )
            self._save(bookings)

        self._logger.info(
            "Booking stored",
            extra={"booking_id": booking_id, "identifier": draft.user_identifier, "kind": str(draft.kind)},
        )
        return booking_id

    def cancel_booking(self, user_identifier: str, booking_id: str) -> bool:
        with self._lock:
            bookings = self._load()
            for entry in bookings:
                if entry.get("booking_id") != booking_id:
                    continue
                if entry.get("user_identifier") != user_identifier or entry.get("status") != BookingStatus.PENDING.value:
                    return False
                entry["status"] = BookingStatus.CANCELLED.value
                self._save(bookings)
                return True
        return False

    def get_booking(self, booking_id: str) -> BookingRecord | None:
        with self._lock:
            bookings = self._load()
        for entry in bookings:
            if entry.get("booking_id") == booking_id:
                return BookingRecord(
                    booking_id=entry["booking_id"],
                    user_identifier=entry["user_identifier"],
                    kind=BookingKind(entry["kind"]),
                    item_id=entry["item_id"],
                    date=date.fromisoformat(entry["date"]),
                    status=BookingStatus(entry["status"]),
                    created_at=entry["created_at"],
                )
        return None


def _entry_key(entry: dict[str, Any]) -> tuple[str, str, str, str] | None:
    try:
        return booking_key(entry["user_identifier"], BookingKind(entry["kind"]), entry["item_id"], date.fromisoformat(entry["date"]))
    except (KeyError, ValueError):
        return None
