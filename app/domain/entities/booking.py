from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

from app.domain.entities.catalog_item import BookingKind


class BookingStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"


@dataclass(frozen=True)
class BookingDraft:
    """A booking request assembled by the conversation, not yet persisted."""

    user_identifier: str
    kind: BookingKind
    item_id: str
    date: date
    status: BookingStatus = BookingStatus.PENDING

    @property
    def dedupe_key(self) -> tuple[str, str, str, str]:
        """Same user, kind, item and day means the same booking request."""
        return booking_key(self.user_identifier, self.kind, self.item_id, self.date)


@dataclass(frozen=True)
class BookingRecord:
    booking_id: str
    user_identifier: str
    kind: BookingKind
    item_id: str
    date: date
    status: BookingStatus
    created_at: float

    @property
    def dedupe_key(self) -> tuple[str, str, str, str]:
        return booking_key(self.user_identifier, self.kind, self.item_id, self.date)


def booking_key(user_identifier: str, kind: BookingKind, item_id: str, day: date) -> tuple[str, str, str, str]:
    return (user_identifier, BookingKind(kind).value, item_id, day.isoformat())
