from __future__ import annotations

import re

_MENU_INDEX = re.compile(r"0|[1-9][0-9]*")


def normalize_input(text: str) -> str:
    return text.strip().lower()


def parse_menu_index(text: str, option_count: int, allow_back: bool = False) -> int | None:
    """
    Parse a numeric menu reply.

    Returns the index when the input is a plain base-10 integer within
    [1, option_count], or 0 when `allow_back` is set and the input is "0".
    Returns None for anything else.
    """
    normalized = normalize_input(text)
    if not _MENU_INDEX.fullmatch(normalized):
        return None

    index = int(normalized)
    lowest = 0 if allow_back else 1
    if lowest <= index <= option_count:
        return index
    return None
