from __future__ import annotations

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, replace
from datetime import datetime
from functools import partial
from typing import Any, Callable, TypeVar
from zoneinfo import ZoneInfo

from app.application.exceptions import CollaboratorError
from app.application.ports.booking_writer import BookingWriterPort
from app.application.ports.catalog import CatalogPort
from app.application.use_cases import reply_composer as replies
from app.application.utils.date_parser import is_past, parse_booking_date, today_in
from app.application.utils.menu_parser import normalize_input, parse_menu_index
from app.application.utils.timeouts import call_with_timeout
from app.domain.entities.booking import BookingDraft
from app.domain.entities.catalog_item import BookingKind
from app.domain.entities.conversation_state import ConversationState, Phase
from app.domain.entities.reply import EngineResult
from app.domain.entities.selection_state import SelectionState

T = TypeVar("T")

RESET_KEYWORD = "hi"

AVAILABILITY_CHOICES = {
    "1": BookingKind.VENUE,
    "venue": BookingKind.VENUE,
    "2": BookingKind.FARM,
    "farm": BookingKind.FARM,
}


@dataclass(frozen=True)
class Branch:
    """The three phases one booking kind walks through."""

    kind: BookingKind
    chooser: Phase
    listing: Phase
    date_entry: Phase


BRANCHES = {
    BookingKind.VENUE: Branch(
        kind=BookingKind.VENUE,
        chooser=Phase.CHOOSING_VENUE_TYPE,
        listing=Phase.BOOKING_VENUE,
        date_entry=Phase.BOOKING_VENUE_DATE,
    ),
    BookingKind.FARM: Branch(
        kind=BookingKind.FARM,
        chooser=Phase.CHOOSING_FARM_TYPE,
        listing=Phase.BOOKING_FARM,
        date_entry=Phase.BOOKING_FARM_DATE,
    ),
}


@dataclass(frozen=True)
class EngineTurn:
    result: EngineResult
    state: ConversationState
    booking_id: str | None = None  # set when this turn created a booking


PhaseHandler = Callable[[ConversationState, str, datetime], EngineTurn]


class ConversationEngine:
    """
    Menu-tree booking conversation.

    `process` maps the stored state and one inbound text to a reply and the
    next state. The engine keeps no per-user data between calls; the caller
    persists the returned state. Only the catalog and the booking writer are
    called, each with a bounded wait.
    """

    def __init__(
        self,
        catalog: CatalogPort,
        booking_writer: BookingWriterPort,
        timezone: ZoneInfo,
        list_limit: int = 5,
        timeout_seconds: float = 5.0,
        executor: Executor | None = None,
    ) -> None:
        self._catalog = catalog
        self._booking_writer = booking_writer
        self._timezone = timezone
        self._list_limit = list_limit
        self._timeout_seconds = timeout_seconds
        self._executor = executor or ThreadPoolExecutor(max_workers=4, thread_name_prefix="collaborator")
        self._logger = logging.getLogger(__name__)

        self._handlers: dict[Phase, PhaseHandler] = {
            Phase.AWAITING_OPTION: self._handle_main_menu,
            Phase.CANCELLING: self._handle_cancelling,
            Phase.CHECKING_AVAILABILITY: self._handle_availability,
        }
        for branch in BRANCHES.values():
            self._handlers[branch.chooser] = partial(self._handle_category_choice, branch)
            self._handlers[branch.listing] = partial(self._handle_item_choice, branch)
            self._handlers[branch.date_entry] = partial(self._handle_date_entry, branch)

    def process(self, state: ConversationState, text: str, now: datetime | None = None) -> EngineTurn:
        if now is None:
            now = datetime.now(self._timezone)
        normalized = normalize_input(text)
        state = replace(state, last_interaction=now.timestamp())

        # "hi" restarts from anywhere and wins over phase handling
        if normalized == RESET_KEYWORD or state.phase == Phase.NEW:
            return _turn(_main_menu_state(state), replies.GREETING)

        handler = self._handlers.get(state.phase)
        if handler is None:
            return _turn(state, replies.FALLBACK)

        try:
            turn = handler(state, normalized, now)
        except Exception as e:
            self._logger.exception(
                "Phase handler failed",
                extra={"identifier": state.identifier, "phase": str(state.phase), "error": str(e)},
            )
            return _turn(state, replies.FALLBACK)

        self._logger.info(
            "Conversation step",
            extra={
                "identifier": state.identifier,
                "phase": str(state.phase),
                "next_phase": str(turn.state.phase),
            },
        )
        return turn

    def _handle_main_menu(self, state: ConversationState, text: str, now: datetime) -> EngineTurn:
        option = parse_menu_index(text, 5)
        if option == 1:
            return self._open_category_menu(state, BRANCHES[BookingKind.VENUE])
        if option == 2:
            return self._open_category_menu(state, BRANCHES[BookingKind.FARM])
        if option == 3:
            return _turn(replace(state, phase=Phase.CANCELLING), replies.CANCEL_PROMPT)
        if option == 4:
            return _turn(replace(state, phase=Phase.CHECKING_AVAILABILITY), replies.AVAILABILITY_PROMPT)
        if option == 5:
            return _turn(state, replies.HELP)
        return _turn(state, replies.INVALID_OPTION)

    def _open_category_menu(self, state: ConversationState, branch: Branch) -> EngineTurn:
        try:
            categories = self._call(self._catalog.list_categories, branch.kind)
        except CollaboratorError as e:
            self._log_collaborator_failure(state, "list_categories", e)
            return _turn(state, replies.TRY_AGAIN_LATER)

        if not categories:
            return _turn(state, replies.no_categories(branch.kind))

        selection = SelectionState(kind=branch.kind, category_options=tuple(categories))
        return _turn(
            replace(state, phase=branch.chooser, selection=selection),
            replies.category_menu(branch.kind, selection.category_options),
        )

    def _handle_category_choice(self, branch: Branch, state: ConversationState, text: str, now: datetime) -> EngineTurn:
        selection = state.selection
        if selection.kind != branch.kind:
            return self._recover(state, "category menu without matching selection")

        index = parse_menu_index(text, len(selection.category_options), allow_back=True)
        if index is None:
            return _turn(state, replies.INVALID_OPTION)
        if index == 0:
            return _turn(_main_menu_state(state), replies.BACK_TO_MENU)

        category = selection.category_options[index - 1]
        try:
            items = self._call(self._catalog.list_by_category, branch.kind, category, self._list_limit)
        except CollaboratorError as e:
            self._log_collaborator_failure(state, "list_by_category", e)
            return _turn(state, replies.TRY_AGAIN_LATER)

        if not items:
            return _turn(state, replies.no_results(category))

        candidates = tuple(items[: self._list_limit])
        next_selection = replace(selection, category=category, candidates=candidates, chosen_item_id=None)
        return EngineTurn(
            result=EngineResult(
                reply_text=replies.item_listing(branch.kind, category, candidates),
                items_to_render=candidates,
            ),
            state=replace(state, phase=branch.listing, selection=next_selection),
        )

    def _handle_item_choice(self, branch: Branch, state: ConversationState, text: str, now: datetime) -> EngineTurn:
        selection = state.selection
        if selection.kind != branch.kind or not selection.category_options:
            return self._recover(state, "item listing without matching selection")

        index = parse_menu_index(text, len(selection.candidates), allow_back=True)
        if index is None:
            return _turn(state, replies.INVALID_OPTION)
        if index == 0:
            # Back to the category submenu; the old candidate list is dropped.
            next_selection = replace(selection, category=None, candidates=(), chosen_item_id=None)
            return _turn(
                replace(state, phase=branch.chooser, selection=next_selection),
                replies.category_menu(branch.kind, selection.category_options),
            )

        item = selection.candidate_at(index)
        if item is None:
            return _turn(state, replies.INVALID_OPTION)
        return _turn(
            replace(state, phase=branch.date_entry, selection=replace(selection, chosen_item_id=item.id)),
            replies.date_prompt(item),
        )

    def _handle_date_entry(self, branch: Branch, state: ConversationState, text: str, now: datetime) -> EngineTurn:
        selection = state.selection
        item = selection.chosen_item()
        if item is None or selection.kind != branch.kind:
            return self._recover(state, "date entry without a chosen item")

        day = parse_booking_date(text)
        if day is None:
            return _turn(state, replies.INVALID_DATE)
        if is_past(day, today_in(self._timezone, now)):
            return _turn(state, replies.PAST_DATE)

        try:
            listed = self._call(self._catalog.get_item, branch.kind, item.id)
        except CollaboratorError as e:
            self._log_collaborator_failure(state, "get_item", e)
            return _turn(state, replies.TRY_AGAIN_LATER)
        if listed is None:
            return self._recover(state, "chosen item is no longer listed")

        draft = BookingDraft(user_identifier=state.identifier, kind=branch.kind, item_id=listed.id, date=day)
        try:
            booking_id = self._call(self._booking_writer.create_booking, draft)
        except CollaboratorError as e:
            self._log_collaborator_failure(state, "create_booking", e)
            return _turn(state, replies.BOOKING_FAILED)

        self._logger.info(
            "Booking created",
            extra={"identifier": state.identifier, "booking_id": booking_id, "kind": str(branch.kind)},
        )
        return EngineTurn(
            result=EngineResult(reply_text=replies.booking_confirmed(listed, day, booking_id)),
            state=replace(state, phase=Phase.DONE, selection=SelectionState()),
            booking_id=booking_id,
        )

    def _handle_cancelling(self, state: ConversationState, text: str, now: datetime) -> EngineTurn:
        next_state = _main_menu_state(state)
        booking_id = text.strip()
        try:
            cancelled = self._call(self._booking_writer.cancel_booking, state.identifier, booking_id)
        except CollaboratorError as e:
            self._log_collaborator_failure(state, "cancel_booking", e)
            return _turn(next_state, replies.CANCEL_FAILED)

        if cancelled:
            self._logger.info("Booking cancelled", extra={"identifier": state.identifier, "booking_id": booking_id})
            return _turn(next_state, replies.booking_cancelled(booking_id))
        return _turn(next_state, replies.booking_not_found(booking_id))

    def _handle_availability(self, state: ConversationState, text: str, now: datetime) -> EngineTurn:
        next_state = _main_menu_state(state)
        kind = AVAILABILITY_CHOICES.get(text)
        if kind is None:
            return _turn(next_state, replies.AVAILABILITY_ACK)

        try:
            categories = self._call(self._catalog.list_categories, kind)
        except CollaboratorError as e:
            self._log_collaborator_failure(state, "list_categories", e)
            return _turn(next_state, replies.TRY_AGAIN_LATER + "\n\n" + replies.MAIN_MENU)
        return _turn(next_state, replies.availability_summary(kind, categories))

    def _recover(self, state: ConversationState, reason: str) -> EngineTurn:
        self._logger.warning(
            "Inconsistent conversation state, resetting",
            extra={"identifier": state.identifier, "phase": str(state.phase), "reason": reason},
        )
        return _turn(_main_menu_state(state), replies.SOMETHING_WENT_WRONG)

    def _call(self, func: Callable[..., T], *args: Any) -> T:
        return call_with_timeout(self._executor, self._timeout_seconds, func, *args)

    def _log_collaborator_failure(self, state: ConversationState, operation: str, error: Exception) -> None:
        self._logger.error(
            "Collaborator call failed",
            extra={
                "identifier": state.identifier,
                "phase": str(state.phase),
                "reason": operation,
                "error": str(error),
            },
        )


def _main_menu_state(state: ConversationState) -> ConversationState:
    return replace(state, phase=Phase.AWAITING_OPTION, selection=SelectionState())


def _turn(state: ConversationState, text: str) -> EngineTurn:
    return EngineTurn(result=EngineResult(reply_text=text), state=state)
