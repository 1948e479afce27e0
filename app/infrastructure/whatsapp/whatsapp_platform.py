from __future__ import annotations

from app.application.ports.message_platform import MessagePlatformPort
from app.infrastructure.whatsapp.whatsapp_client import WhatsAppClient


class WhatsAppPlatform(MessagePlatformPort):
    def __init__(self, client: WhatsAppClient) -> None:
        self._client = client

    def send_text(self, recipient_id: str, text: str) -> None:
        self._client.send_text(recipient_id=recipient_id, text=text)

    def send_image(self, recipient_id: str, image_url: str, caption: str = "") -> None:
        self._client.send_image(recipient_id=recipient_id, image_url=image_url, caption=caption)
