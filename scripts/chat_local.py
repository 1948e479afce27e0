#!/usr/bin/env python3
"""
Chat with the booking bot from a terminal, without HTTP or WhatsApp.

Usage:
  python3 scripts/chat_local.py

Each line goes through HandleIncomingMessageUseCase exactly like a webhook
message would; the reply is printed instead of being sent.
"""

from __future__ import annotations

import os
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.domain.entities.message import Message  # noqa: E402
from app.wiring.dependencies import get_container  # noqa: E402

COMMANDS = {
    "/new": "switch to a fresh identifier",
    "/state": "show the stored phase and selection",
    "/history": "show the last 10 logged messages",
    "/quit": "exit",
}


def _show_commands() -> None:
    for name, description in COMMANDS.items():
        print(f"  {name:<9} {description}")


def _show_state(store, identifier: str) -> None:
    state = store.get(identifier)
    if state is None:
        print("(no stored state yet)")
        return
    selection = state.selection
    print(f"phase:     {state.phase}")
    print(f"kind:      {selection.kind or '-'}")
    print(f"category:  {selection.category or '-'}")
    print(f"listed:    {', '.join(item.id for item in selection.candidates) or '-'}")
    print(f"chosen:    {selection.chosen_item_id or '-'}")


def main() -> None:
    identifier = os.getenv("CHAT_IDENTIFIER", "919000000001")
    container = get_container()
    use_case = container["use_case"]
    store = container["store"]

    print(f"Booking bot chat as {identifier}. Say 'hi' to begin.")
    _show_commands()

    while True:
        try:
            line = input("\nyou> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return
        if not line:
            continue

        command = line.lower()
        if command in ("/quit", "/exit"):
            return
        if command == "/new":
            identifier = f"local_{int(time.time())}"
            print(f"identifier: {identifier}")
            continue
        if command == "/state":
            _show_state(store, identifier)
            continue
        if command == "/history":
            for entry in store.get_history(identifier)[-10:]:
                print(f"{entry.get('sender')}: {entry.get('text', '')}")
            continue
        if command.startswith("/"):
            _show_commands()
            continue

        message = Message(
            id=f"local_{time.time_ns()}",
            sender_id=identifier,
            text=line,
            timestamp=int(time.time()),
            platform="local",
        )
        result = use_case.handle(message)
        if result is None:
            print("bot> (message was not processed, see logs)")
            continue

        print(f"bot> {result.reply_text}")
        for item in result.items_to_render:
            for image_url in item.images:
                print(f"     [image] {item.display_name}: {image_url}")


if __name__ == "__main__":
    main()
