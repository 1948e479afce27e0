from __future__ import annotations

import logging

from app.application.ports.message_platform import MessagePlatformPort


class MockWhatsAppPlatform(MessagePlatformPort):
    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []
        self._logger = logging.getLogger(__name__)

    def send_text(self, recipient_id: str, text: str) -> None:
        self.sent.append({"to": recipient_id, "type": "text", "body": text})
        self._logger.info("Mock send to WhatsApp", extra={"identifier": recipient_id, "reply_text": text})

    def send_image(self, recipient_id: str, image_url: str, caption: str = "") -> None:
        self.sent.append({"to": recipient_id, "type": "image", "body": image_url, "caption": caption})
        self._logger.info("Mock image send to WhatsApp", extra={"identifier": recipient_id, "image_url": image_url})
