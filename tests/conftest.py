"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

import time
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from app.application.ports.booking_writer import BookingWriterPort
from app.application.ports.catalog import CatalogPort
from app.application.use_cases.conversation_engine import ConversationEngine, EngineTurn
from app.domain.entities.booking import BookingDraft
from app.domain.entities.catalog_item import BookingKind, CatalogItem
from app.domain.entities.conversation_state import ConversationState
from app.infrastructure.bookings.memory_booking_writer import MemoryBookingWriter
from app.infrastructure.catalog.catalog_store import CatalogStore

TZ = ZoneInfo("Asia/Kolkata")
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=TZ)
USER = "919800000001"

TEST_ITEMS = [
    CatalogItem(
        id="v1",
        display_name="Royal Orchid Banquets",
        kind=BookingKind.VENUE,
        category="Wedding Hall",
        location="Jaipur, Rajasthan",
        capacity=600,
        price=150000,
        images=("https://img.example/v1-a.jpg", "https://img.example/v1-b.jpg"),
    ),
    CatalogItem(id="v2", display_name="Lotus Court", kind=BookingKind.VENUE, category="Wedding Hall"),
    CatalogItem(id="v3", display_name="Silver Oak Banquet", kind=BookingKind.VENUE, category="Banquet"),
    CatalogItem(id="f1", display_name="Mango Grove Farmhouse", kind=BookingKind.FARM, category="Farmhouse"),
    CatalogItem(id="f2", display_name="Riverside Farm Stay", kind=BookingKind.FARM, category="Farmhouse"),
]


class FakeCatalog(CatalogPort):
    """Catalog with switchable failures, delays and unlisted items."""

    def __init__(self, items: list[CatalogItem], extra_categories: dict[BookingKind, list[str]] | None = None) -> None:
        self._store = CatalogStore(items)
        self._extra_categories = extra_categories or {}
        self.fail_on: set[str] = set()
        self.delay_seconds = 0.0
        self.hidden_ids: set[str] = set()
        self.calls: list[str] = []

    def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        if operation in self.fail_on:
            raise RuntimeError(f"{operation} unavailable")

    def list_categories(self, kind: BookingKind) -> list[str]:
        self._enter("list_categories")
        return self._store.list_categories(kind) + self._extra_categories.get(kind, [])

    def list_by_category(self, kind: BookingKind, category: str, limit: int) -> list[CatalogItem]:
        self._enter("list_by_category")
        return self._store.list_by_category(kind, category, limit)

    def get_item(self, kind: BookingKind, item_id: str) -> CatalogItem | None:
        self._enter("get_item")
        if item_id in self.hidden_ids:
            return None
        return self._store.get_item(kind, item_id)


class FlakyBookingWriter(BookingWriterPort):
    def __init__(self) -> None:
        self.inner = MemoryBookingWriter()
        self.fail = False
        self.delay_seconds = 0.0
        self.drafts: list[BookingDraft] = []
        self.returned_ids: list[str] = []

    def create_booking(self, draft: BookingDraft) -> str:
        if self.fail:
            raise RuntimeError("database unavailable")
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        self.drafts.append(draft)
        booking_id = self.inner.create_booking(draft)
        self.returned_ids.append(booking_id)
        return booking_id

    def cancel_booking(self, user_identifier: str, booking_id: str) -> bool:
        if self.fail:
            raise RuntimeError("database unavailable")
        return self.inner.cancel_booking(user_identifier, booking_id)


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog(TEST_ITEMS, extra_categories={BookingKind.FARM: ["Orchard"]})


@pytest.fixture
def booking_writer() -> FlakyBookingWriter:
    return FlakyBookingWriter()


@pytest.fixture
def engine(catalog: FakeCatalog, booking_writer: FlakyBookingWriter) -> ConversationEngine:
    return ConversationEngine(
        catalog=catalog,
        booking_writer=booking_writer,
        timezone=TZ,
        list_limit=5,
        timeout_seconds=1.0,
    )


@pytest.fixture
def new_state() -> ConversationState:
    return ConversationState(identifier=USER)


def converse(engine: ConversationEngine, state: ConversationState, *texts: str, now: datetime = NOW) -> EngineTurn:
    """Feed several messages in order and return the last turn."""
    turn = None
    for text in texts:
        turn = engine.process(state, text, now=now)
        state = turn.state
    assert turn is not None
    return turn
