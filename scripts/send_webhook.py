#!/usr/bin/env python3
"""
Post fake WhatsApp text messages to a running server, one webhook per message.

Usage:
  uvicorn app.main:app --reload --port 8001
  python3 scripts/send_webhook.py hi 1 1 1 2099-12-31
"""

from __future__ import annotations

import argparse
import hashlib
import hmac
import json
import time
from typing import Any

import httpx
from httpx import ConnectError


def build_payload(sender_id: str, phone_number_id: str, text: str) -> dict[str, Any]:
    now = int(time.time())
    return {
        "object": "whatsapp_business_account",
        "entry": [
            {
                "id": "waba_local",
                "changes": [
                    {
                        "field": "messages",
                        "value": {
                            "messaging_product": "whatsapp",
                            "metadata": {"phone_number_id": phone_number_id},
                            "messages": [
                                {
                                    "from": sender_id,
                                    "id": f"wamid.local_{time.time_ns()}",
                                    "timestamp": str(now),
                                    "type": "text",
                                    "text": {"body": text},
                                }
                            ],
                        },
                    }
                ],
            }
        ],
    }


def sign_body(secret: str, body: bytes) -> str:
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


def post_text(client: httpx.Client, url: str, payload: dict[str, Any], app_secret: str) -> httpx.Response:
    body = json.dumps(payload).encode("utf-8")
    headers = {"Content-Type": "application/json"}
    if app_secret:
        headers["X-Hub-Signature-256"] = sign_body(app_secret, body)
    return client.post(url, content=body, headers=headers)


def main() -> None:
    parser = argparse.ArgumentParser(description="Send WhatsApp webhook POSTs to a local server")
    parser.add_argument("texts", nargs="*", default=["hi"], help="messages to send in order")
    parser.add_argument("--url", default="http://127.0.0.1:8001/webhooks/whatsapp")
    parser.add_argument("--sender", default="919000000001")
    parser.add_argument("--phone-number-id", default="100000000000001")
    parser.add_argument("--app-secret", default="", help="Meta app secret for signature")
    parser.add_argument("--pause", type=float, default=0.5, help="seconds between messages")
    args = parser.parse_args()

    with httpx.Client(timeout=10.0) as client:
        for index, text in enumerate(args.texts):
            if index:
                time.sleep(args.pause)
            payload = build_payload(args.sender, args.phone_number_id, text)
            try:
                resp = post_text(client, args.url, payload, args.app_secret)
            except ConnectError:
                print("Connection refused. Start the server with: uvicorn app.main:app --reload --port 8001")
                return
            print(f"{text!r} -> {resp.status_code} {resp.text}".rstrip())


if __name__ == "__main__":
    main()
