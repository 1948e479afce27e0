from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from app.domain.entities.selection_state import SelectionState


class Phase(str, Enum):
    NEW = "new"
    AWAITING_OPTION = "awaiting_option"
    CHOOSING_VENUE_TYPE = "choosing_venue_type"
    BOOKING_VENUE = "booking_venue"
    BOOKING_VENUE_DATE = "booking_venue_date"
    CHOOSING_FARM_TYPE = "choosing_farm_type"
    BOOKING_FARM = "booking_farm"
    BOOKING_FARM_DATE = "booking_farm_date"
    CANCELLING = "cancelling"
    CHECKING_AVAILABILITY = "checking_availability"
    DONE = "done"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ConversationState:
    identifier: str
    phase: Phase = Phase.NEW
    selection: SelectionState = SelectionState()
    last_interaction: float | None = None  # epoch seconds, set by the engine
