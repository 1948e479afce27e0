from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class BookingKind(str, Enum):
    VENUE = "Venue"
    FARM = "Farm"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class CatalogItem:
    id: str
    display_name: str
    kind: BookingKind
    category: str
    location: str | None = None
    capacity: int | None = None
    price: int | None = None  # starting price in INR
    images: tuple[str, ...] = ()
