from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import replace
from datetime import datetime

from app.application.ports.booking_writer import BookingWriterPort
from app.domain.entities.booking import BookingDraft, BookingRecord, BookingStatus


def new_booking_id() -> str:
    return uuid.uuid4().hex[:10]


class MemoryBookingWriter(BookingWriterPort):
    def __init__(self) -> None:
        self._bookings: dict[str, BookingRecord] = {}
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def create_booking(self, draft: BookingDraft) -> str:
        with self._lock:
            for record in self._bookings.values():
                if record.status == BookingStatus.PENDING and record.dedupe_key == draft.dedupe_key:
                    self._logger.info(
                        "Booking already pending, reusing it",
                        extra={"booking_id": record.booking_id, "identifier": draft.user_identifier},
                    )
                    return record.booking_id

            booking_id = new_booking_id()
            self._bookings[booking_id] = BookingRecord(
                booking_id=booking_id,
                user_identifier=draft.user_identifier,
                kind=draft.kind,
                item_id=draft.item_id,
                date=draft.date,
                status=draft.status,
                created_at=datetime.now().timestamp(),
            )

        self._logger.info(
            "Booking stored",
            extra={"booking_id": booking_id, "identifier": draft.user_identifier, "kind": str(draft.kind)},
        )
        return booking_id

    def cancel_booking(self, user_identifier: str, booking_id: str) -> bool:
        with self._lock:
            record = self._bookings.get(booking_id)
            if record is None or record.user_identifier != user_identifier or record.status != BookingStatus.PENDING:
                return False
            self._bookings[booking_id] = replace(record, status=BookingStatus.CANCELLED)
            return True

    def get_booking(self, booking_id: str) -> BookingRecord | None:
        return self._bookings.get(booking_id)
