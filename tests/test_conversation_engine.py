"""
Transition table of the booking conversation.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone

import pytest

from app.application.use_cases import reply_composer as replies
from app.domain.entities.booking import BookingStatus
from app.domain.entities.catalog_item import BookingKind
from app.domain.entities.conversation_state import ConversationState, Phase
from app.domain.entities.selection_state import SelectionState

from conftest import NOW, TEST_ITEMS, USER, converse

VENUE_HALLS = tuple(item for item in TEST_ITEMS if item.category == "Wedding Hall")
FARMHOUSES = tuple(item for item in TEST_ITEMS if item.category == "Farmhouse")


def _venue_listing_state() -> ConversationState:
    return ConversationState(
        identifier=USER,
        phase=Phase.BOOKING_VENUE,
        selection=SelectionState(
            kind=BookingKind.VENUE,
            category_options=("Wedding Hall", "Banquet"),
            category="Wedding Hall",
            candidates=VENUE_HALLS,
        ),
    )


def _venue_date_state() -> ConversationState:
    state = _venue_listing_state()
    return replace(
        state,
        phase=Phase.BOOKING_VENUE_DATE,
        selection=replace(state.selection, chosen_item_id="v2"),
    )


@pytest.mark.parametrize("phase", list(Phase))
def test_hi_resets_from_every_phase(engine, phase):
    state = replace(_venue_date_state(), phase=phase)

    turn = engine.process(state, "hi", now=NOW)

    assert turn.state.phase == Phase.AWAITING_OPTION
    assert turn.state.selection == SelectionState()
    assert turn.result.reply_text == replies.GREETING


def test_hi_is_matched_after_trimming_and_lowercasing(engine):
    turn = engine.process(_venue_date_state(), "  HI ", now=NOW)
    assert turn.state.phase == Phase.AWAITING_OPTION


def test_new_user_gets_main_menu_for_any_text(engine, new_state):
    turn = engine.process(new_state, "hello there", now=NOW)

    assert turn.state.phase == Phase.AWAITING_OPTION
    assert turn.result.reply_text == replies.GREETING


def test_every_message_updates_last_interaction(engine, new_state):
    turn = engine.process(new_state, "hi", now=NOW)
    assert turn.state.last_interaction == NOW.timestamp()


@pytest.mark.parametrize(
    "text,phase",
    [
        ("1", Phase.CHOOSING_VENUE_TYPE),
        ("2", Phase.CHOOSING_FARM_TYPE),
        ("3", Phase.CANCELLING),
        ("4", Phase.CHECKING_AVAILABILITY),
        ("5", Phase.AWAITING_OPTION),
    ],
)
def test_main_menu_options(engine, new_state, text, phase):
    turn = converse(engine, new_state, "hi", text)
    assert turn.state.phase == phase


def test_venue_option_shows_category_submenu(engine, new_state):
    turn = converse(engine, new_state, "hi", "1")

    assert turn.state.selection.kind == BookingKind.VENUE
    assert turn.state.selection.category_options == ("Wedding Hall", "Banquet")
    assert "1) Wedding Hall" in turn.result.reply_text
    assert "2) Banquet" in turn.result.reply_text
    assert "0 to go back" in turn.result.reply_text


def test_help_option_stays_on_main_menu(engine, new_state):
    turn = converse(engine, new_state, "hi", "5")
    assert turn.result.reply_text == replies.HELP


@pytest.mark.parametrize("text", ["0", "6", "01", "abc", "1 2", "book", "-1", ""])
def test_main_menu_rejects_other_input(engine, text):
    state = ConversationState(identifier=USER, phase=Phase.AWAITING_OPTION)

    turn = engine.process(state, text, now=NOW)

    assert turn.state.phase == Phase.AWAITING_OPTION
    assert turn.result.reply_text == replies.INVALID_OPTION


def test_no_categories_keeps_main_menu(booking_writer):
    from app.application.use_cases.conversation_engine import ConversationEngine
    from conftest import TZ, FakeCatalog

    venues_only = [item for item in TEST_ITEMS if item.kind == BookingKind.VENUE]
    engine = ConversationEngine(catalog=FakeCatalog(venues_only), booking_writer=booking_writer, timezone=TZ)
    state = ConversationState(identifier=USER, phase=Phase.AWAITING_OPTION)

    turn = engine.process(state, "2", now=NOW)

    assert turn.state.phase == Phase.AWAITING_OPTION
    assert turn.result.reply_text == replies.no_categories(BookingKind.FARM)


def test_category_back_returns_to_main_menu(engine, new_state):
    turn = converse(engine, new_state, "hi", "1", "0")

    assert turn.state.phase == Phase.AWAITING_OPTION
    assert turn.state.selection == SelectionState()
    assert turn.result.reply_text == replies.BACK_TO_MENU


@pytest.mark.parametrize("text", ["3", "x", "1.", "-2"])
def test_category_choice_rejects_invalid_index(engine, new_state, text):
    chooser = converse(engine, new_state, "hi", "1").state

    turn = engine.process(chooser, text, now=NOW)

    assert turn.state.phase == Phase.CHOOSING_VENUE_TYPE
    assert turn.state.selection == chooser.selection
    assert turn.result.reply_text == replies.INVALID_OPTION


def test_category_choice_lists_items_in_catalog_order(engine, new_state):
    turn = converse(engine, new_state, "hi", "1", "1")

    assert turn.state.phase == Phase.BOOKING_VENUE
    assert turn.state.selection.category == "Wedding Hall"
    assert turn.state.selection.candidates == VENUE_HALLS
    assert turn.result.items_to_render == VENUE_HALLS
    assert "1) *Royal Orchid Banquets*" in turn.result.reply_text
    assert "2) *Lotus Court*" in turn.result.reply_text
    assert "📍 *Location:* Jaipur, Rajasthan" in turn.result.reply_text


def test_listing_is_capped_at_limit(booking_writer):
    from app.application.use_cases.conversation_engine import ConversationEngine
    from app.domain.entities.catalog_item import CatalogItem
    from conftest import TZ, FakeCatalog

    halls = [
        CatalogItem(id=f"h{i}", display_name=f"Hall {i}", kind=BookingKind.VENUE, category="Banquet")
        for i in range(8)
    ]
    engine = ConversationEngine(catalog=FakeCatalog(halls), booking_writer=booking_writer, timezone=TZ, list_limit=5)

    turn = converse(engine, ConversationState(identifier=USER), "hi", "1", "1")

    assert [item.id for item in turn.state.selection.candidates] == ["h0", "h1", "h2", "h3", "h4"]


def test_empty_category_does_not_advance(engine, new_state):
    chooser = converse(engine, new_state, "hi", "2").state
    assert chooser.selection.category_options == ("Farmhouse", "Orchard")

    turn = engine.process(chooser, "2", now=NOW)

    assert turn.state.phase == Phase.CHOOSING_FARM_TYPE
    assert turn.state.selection == chooser.selection
    assert turn.result.reply_text == replies.no_results("Orchard")


@pytest.mark.parametrize("index", [1, 2])
def test_item_choice_sets_chosen_item(engine, index):
    turn = engine.process(_venue_listing_state(), str(index), now=NOW)

    assert turn.state.phase == Phase.BOOKING_VENUE_DATE
    assert turn.state.selection.chosen_item_id == VENUE_HALLS[index - 1].id
    assert turn.state.selection.candidates == VENUE_HALLS
    assert "YYYY-MM-DD" in turn.result.reply_text


@pytest.mark.parametrize("text", ["3", "99", "one", "1,2", ""])
def test_item_choice_rejects_out_of_range(engine, text):
    state = _venue_listing_state()

    turn = engine.process(state, text, now=NOW)

    assert turn.state == replace(state, last_interaction=NOW.timestamp())
    assert turn.result.reply_text == replies.INVALID_OPTION


def test_item_back_clears_candidates_and_never_reuses_them(engine, new_state, catalog):
    listing = converse(engine, new_state, "hi", "1", "1").state

    back = engine.process(listing, "0", now=NOW)

    assert back.state.phase == Phase.CHOOSING_VENUE_TYPE
    assert back.state.selection.candidates == ()
    assert back.state.selection.category is None
    assert back.state.selection.chosen_item_id is None
    assert "1) Wedding Hall" in back.result.reply_text

    # "2" is now a category choice, not the second hall of the old list
    calls_before = catalog.calls.count("list_by_category")
    turn = engine.process(back.state, "2", now=NOW)

    assert catalog.calls.count("list_by_category") == calls_before + 1
    assert turn.state.phase == Phase.BOOKING_VENUE
    assert turn.state.selection.category == "Banquet"
    assert turn.state.selection.chosen_item_id is None


def test_numeric_reply_after_back_is_invalid_beyond_categories(engine, new_state):
    listing = converse(engine, new_state, "hi", "1", "1").state
    back = engine.process(listing, "0", now=NOW).state

    turn = engine.process(back, "3", now=NOW)

    assert turn.state.phase == Phase.CHOOSING_VENUE_TYPE
    assert turn.result.reply_text == replies.INVALID_OPTION


def test_date_phase_without_chosen_item_resets(engine):
    state = replace(_venue_listing_state(), phase=Phase.BOOKING_VENUE_DATE)

    turn = engine.process(state, "2099-12-31", now=NOW)

    assert turn.state.phase == Phase.AWAITING_OPTION
    assert turn.state.selection == SelectionState()
    assert turn.result.reply_text == replies.SOMETHING_WENT_WRONG


def test_date_phase_with_unknown_chosen_item_resets(engine):
    state = _venue_date_state()
    state = replace(state, selection=replace(state.selection, chosen_item_id="not-listed"))

    turn = engine.process(state, "2099-12-31", now=NOW)

    assert turn.state.phase == Phase.AWAITING_OPTION
    assert turn.result.reply_text == replies.SOMETHING_WENT_WRONG


@pytest.mark.parametrize("text", ["not-a-date", "2023-02-30", "next friday", "0"])
def test_unparsable_date_is_rejected(engine, booking_writer, text):
    state = _venue_date_state()

    turn = engine.process(state, text, now=NOW)

    assert turn.state.phase == Phase.BOOKING_VENUE_DATE
    assert turn.state.selection == state.selection
    assert turn.result.reply_text == replies.INVALID_DATE
    assert booking_writer.drafts == []


@pytest.mark.parametrize("text", ["2020-01-01", "2026-10-18"])
def test_past_date_is_rejected(engine, booking_writer, text):
    state = _venue_date_state()

    turn = engine.process(state, text, now=NOW)

    assert turn.state.phase == Phase.BOOKING_VENUE_DATE
    assert turn.state.selection == state.selection
    assert turn.result.reply_text == replies.PAST_DATE
    assert booking_writer.drafts == []


def test_today_is_accepted(engine):
    turn = engine.process(_venue_date_state(), "2026-10-19", now=NOW)
    assert turn.state.phase == Phase.DONE


def test_past_check_uses_reference_timezone(engine):
    # 19:00 UTC on the 19th is past midnight in India, so the 19th is already over
    late_utc = datetime(2026, 10, 19, 19, 0, tzinfo=timezone.utc)

    turn = engine.process(_venue_date_state(), "2026-10-19", now=late_utc)

    assert turn.result.reply_text == replies.PAST_DATE


def test_valid_date_creates_booking(engine, booking_writer):
    turn = engine.process(_venue_date_state(), "2099-12-31", now=NOW)

    assert turn.state.phase == Phase.DONE
    assert turn.state.selection == SelectionState()
    assert "2099-12-31" in turn.result.reply_text
    assert "Lotus Court" in turn.result.reply_text
    assert turn.booking_id is not None
    assert turn.booking_id in turn.result.reply_text

    [draft] = booking_writer.drafts
    assert draft.user_identifier == USER
    assert draft.kind == BookingKind.VENUE
    assert draft.item_id == "v2"
    assert draft.date == date(2099, 12, 31)
    assert draft.status == BookingStatus.PENDING


def test_month_name_dates_are_accepted(engine, booking_writer):
    turn = engine.process(_venue_date_state(), "31 December 2099", now=NOW)

    assert turn.state.phase == Phase.DONE
    assert booking_writer.drafts[0].date == date(2099, 12, 31)


def test_item_removed_from_catalog_resets(engine, catalog, booking_writer):
    catalog.hidden_ids.add("v2")

    turn = engine.process(_venue_date_state(), "2099-12-31", now=NOW)

    assert turn.state.phase == Phase.AWAITING_OPTION
    assert turn.result.reply_text == replies.SOMETHING_WENT_WRONG
    assert booking_writer.drafts == []


def test_farm_booking_end_to_end(engine, new_state, booking_writer):
    state = new_state

    turn = engine.process(state, "hi", now=NOW)
    assert turn.result.reply_text == replies.GREETING

    turn = engine.process(turn.state, "2", now=NOW)
    assert turn.state.phase == Phase.CHOOSING_FARM_TYPE

    turn = engine.process(turn.state, "1", now=NOW)
    assert turn.state.phase == Phase.BOOKING_FARM
    assert len(turn.result.items_to_render) == 2

    turn = engine.process(turn.state, "1", now=NOW)
    assert turn.state.phase == Phase.BOOKING_FARM_DATE
    assert turn.state.selection.chosen_item_id == FARMHOUSES[0].id

    turn = engine.process(turn.state, "2099-12-31", now=NOW)
    assert turn.state.phase == Phase.DONE
    assert "2099-12-31" in turn.result.reply_text
    assert booking_writer.drafts[0].kind == BookingKind.FARM
    assert booking_writer.drafts[0].item_id == "f1"


def test_done_phase_falls_back(engine):
    state = ConversationState(identifier=USER, phase=Phase.DONE)

    turn = engine.process(state, "1", now=NOW)

    assert turn.state.phase == Phase.DONE
    assert turn.result.reply_text == replies.FALLBACK


def test_cancel_own_pending_booking(engine, booking_writer, new_state):
    booked = converse(engine, new_state, "hi", "1", "1", "1", "2099-12-31")
    booking_id = booked.booking_id

    turn = converse(engine, booked.state, "hi", "3", booking_id)

    assert turn.state.phase == Phase.AWAITING_OPTION
    assert turn.result.reply_text == replies.booking_cancelled(booking_id)
    assert booking_writer.inner.get_booking(booking_id).status == BookingStatus.CANCELLED


def test_cancel_unknown_or_foreign_booking(engine, booking_writer, new_state):
    booked = converse(engine, new_state, "hi", "1", "1", "1", "2099-12-31")
    stranger = ConversationState(identifier="919811111111", phase=Phase.CANCELLING)

    turn = engine.process(stranger, booked.booking_id, now=NOW)

    assert turn.state.phase == Phase.AWAITING_OPTION
    assert turn.result.reply_text == replies.booking_not_found(booked.booking_id)
    assert booking_writer.inner.get_booking(booked.booking_id).status == BookingStatus.PENDING


@pytest.mark.parametrize("text,expected", [("venue", "Wedding Hall, Banquet"), ("2", "Farmhouse, Orchard")])
def test_availability_lists_categories(engine, text, expected):
    state = ConversationState(identifier=USER, phase=Phase.CHECKING_AVAILABILITY)

    turn = engine.process(state, text, now=NOW)

    assert turn.state.phase == Phase.AWAITING_OPTION
    assert expected in turn.result.reply_text


def test_availability_acknowledges_anything_else(engine):
    state = ConversationState(identifier=USER, phase=Phase.CHECKING_AVAILABILITY)

    turn = engine.process(state, "next weekend?", now=NOW)

    assert turn.state.phase == Phase.AWAITING_OPTION
    assert turn.result.reply_text == replies.AVAILABILITY_ACK


def test_mismatched_selection_kind_resets(engine):
    state = ConversationState(
        identifier=USER,
        phase=Phase.CHOOSING_VENUE_TYPE,
        selection=SelectionState(kind=BookingKind.FARM, category_options=("Farmhouse",)),
    )

    turn = engine.process(state, "1", now=NOW)

    assert turn.state.phase == Phase.AWAITING_OPTION
    assert turn.result.reply_text == replies.SOMETHING_WENT_WRONG


def test_unexpected_handler_error_keeps_state(engine):
    def boom(state, text, now):
        raise KeyError("unexpected")

    engine._handlers[Phase.AWAITING_OPTION] = boom
    state = ConversationState(identifier=USER, phase=Phase.AWAITING_OPTION)

    turn = engine.process(state, "1", now=NOW)

    assert turn.state == replace(state, last_interaction=NOW.timestamp())
    assert turn.result.reply_text == replies.FALLBACK
