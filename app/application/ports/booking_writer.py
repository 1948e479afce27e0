from __future__ import annotations

from abc import ABC, abstractmethod

from app.domain.entities.booking import BookingDraft


class BookingWriterPort(ABC):
    @abstractmethod
    def create_booking(self, draft: BookingDraft) -> str:
        """
        Persist a booking draft and return its booking_id.

        Idempotent: a draft matching a Pending booking of the same user, kind,
        item and date returns that booking's id without writing again.
        """
        raise NotImplementedError

    @abstractmethod
    def cancel_booking(self, user_identifier: str, booking_id: str) -> bool:
        """Cancel a pending booking owned by the user. Returns True if cancelled."""
        raise NotImplementedError
