from __future__ import annotations

import re
from datetime import date, datetime
from zoneinfo import ZoneInfo

DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d %B %Y",
    "%d %b %Y",
    "%B %d %Y",
    "%b %d %Y",
)


def parse_booking_date(text: str) -> date | None:
    """Parse a calendar date from text. Returns None if it is not a real date."""
    normalized = " ".join(text.lower().strip().replace(",", " ").split())
    if not normalized:
        return None

    # strptime tolerates surrounding text for some directives; require the date to be the whole input
    if not re.fullmatch(r"[0-9a-z/\- ]+", normalized):
        return None

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(normalized, fmt).date()
        except ValueError:
            continue

    return None


def today_in(timezone: ZoneInfo, now: datetime | None = None) -> date:
    """Calendar date of `now` (default: current time) in the reference timezone."""
    if now is None:
        return datetime.now(timezone).date()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone)
    return now.astimezone(timezone).date()


def is_past(day: date, today: date) -> bool:
    return day < today
