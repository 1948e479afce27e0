from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from app.domain.entities.catalog_item import BookingKind, CatalogItem


MAIN_MENU = """Reply with:
1️⃣ Book a Venue
2️⃣ Book a Farm
3️⃣ Cancel a Booking
4️⃣ Check Availability
5️⃣ Help"""

GREETING = "👋 Hey there! Welcome to *Venue & Farm Booking Bot*.\n\n" + MAIN_MENU

HELP = """🤝 I can help you:
- Book a venue/farm
- Cancel bookings
- Check availability

Type "hi" anytime to restart."""

INVALID_OPTION = "❗️ Invalid option. Please pick a valid number from the list."
BACK_TO_MENU = "🔙 Back to main menu.\n\n" + MAIN_MENU
INVALID_DATE = "❗️ Invalid date format. Please enter date as YYYY-MM-DD."
PAST_DATE = "❗️ Date cannot be in the past. Please pick a valid future date (YYYY-MM-DD)."
SOMETHING_WENT_WRONG = '❗️ Something went wrong. Type "hi" to start again.'
TRY_AGAIN_LATER = "⏳ We couldn't reach our listings right now. Please try again in a moment."
BOOKING_FAILED = "⏳ We couldn't save your booking right now. Please send the date again in a moment."
FALLBACK = '🤖 Sorry, I didn\'t get that. Type "hi" to start over.'

CANCEL_PROMPT = "❌ Provide booking ID to cancel:"
AVAILABILITY_PROMPT = "🔍 Check *venue* or *farm* availability?"
AVAILABILITY_ACK = "🔍 Thanks! Our team will get back to you about availability.\n\n" + MAIN_MENU
CANCEL_FAILED = "⏳ We couldn't reach our bookings right now. Please try again in a moment.\n\n" + MAIN_MENU


@dataclass(frozen=True)
class BranchLabels:
    emoji: str
    noun: str  # singular, lower case

    @property
    def plural(self) -> str:
        return f"{self.noun}s"


BRANCH_LABELS = {
    BookingKind.VENUE: BranchLabels(emoji="🏛️", noun="venue"),
    BookingKind.FARM: BranchLabels(emoji="🌿", noun="farm"),
}


def category_menu(kind: BookingKind, categories: tuple[str, ...] | list[str]) -> str:
    labels = BRANCH_LABELS[kind]
    lines = [f"{labels.emoji} {labels.noun.capitalize()} types:"]
    lines.extend(f"{i}) {category}" for i, category in enumerate(categories, start=1))
    lines.append("")
    lines.append("Reply with the number to choose, or 0 to go back.")
    return "\n".join(lines)


def no_categories(kind: BookingKind) -> str:
    return f"😔 No {BRANCH_LABELS[kind].noun} categories found right now."


def no_results(category: str) -> str:
    return f"😔 Sorry, no {category}s found right now. Please reply 0 to go back."


def item_listing(kind: BookingKind, category: str, items: tuple[CatalogItem, ...] | list[CatalogItem]) -> str:
    labels = BRANCH_LABELS[kind]
    blocks = [f"{labels.emoji} *{category} {labels.plural} available:*"]
    for i, item in enumerate(items, start=1):
        blocks.append(_item_block(i, item))
    blocks.append("👉 *Reply with the number* to choose, or 0 to go back.")
    return _join_blocks(blocks)


def date_prompt(item: CatalogItem) -> str:
    return f"📅 Great choice, *{item.display_name}*! Please enter your booking date (YYYY-MM-DD):"


def booking_confirmed(item: CatalogItem, day: date, booking_id: str) -> str:
    return (
        f"✅ Request received for {item.display_name} on {day.isoformat()}! Awaiting vendor approval.\n"
        f"Your booking ID is *{booking_id}*."
    )


def booking_cancelled(booking_id: str) -> str:
    return f"✅ Booking {booking_id} has been cancelled.\n\n{MAIN_MENU}"


def booking_not_found(booking_id: str) -> str:
    return f"❗️ No pending booking with ID {booking_id} was found for your number.\n\n{MAIN_MENU}"


def availability_summary(kind: BookingKind, categories: list[str]) -> str:
    labels = BRANCH_LABELS[kind]
    if not categories:
        return f"😔 No {labels.plural} are open for booking right now.\n\n{MAIN_MENU}"
    option = "1" if kind == BookingKind.VENUE else "2"
    listed = ", ".join(categories)
    return f"{labels.emoji} {labels.noun.capitalize()} types open for booking: {listed}.\nReply {option} to book one."


def _item_block(position: int, item: CatalogItem) -> str:
    lines = [f"{position}) *{item.display_name}*", f"🏷️ *Category:* {item.category}"]
    if item.location:
        lines.append(f"📍 *Location:* {item.location}")
    if item.capacity:
        lines.append(f"👥 *Capacity:* {item.capacity}")
    if item.price:
        lines.append(f"💰 *From:* ₹{item.price}")
    return "\n".join(lines)


def _join_blocks(blocks: list[str]) -> str:
    return "\n\n".join(block.strip() for block in blocks if block and block.strip())
