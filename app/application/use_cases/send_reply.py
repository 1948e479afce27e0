from __future__ import annotations

import logging

from app.application.ports.message_platform import MessagePlatformPort
from app.domain.entities.reply import EngineResult


class SendReplyUseCase:
    def __init__(self, platform: MessagePlatformPort, auto_reply_enabled: bool) -> None:
        self._platform = platform
        self._auto_reply_enabled = auto_reply_enabled
        self._logger = logging.getLogger(__name__)

    def execute(self, recipient_id: str, result: EngineResult) -> bool:
        """Send the reply text, then each listed item's images. Returns True if actually sent."""
        if not self._auto_reply_enabled:
            self._logger.info("WOULD_SEND_REPLY", extra={"identifier": recipient_id, "reply_text": result.reply_text})
            self._logger.info("AUTO_REPLY_ENABLED=false -> skipping send")
            return False

        self._platform.send_text(recipient_id=recipient_id, text=result.reply_text)
        for item in result.items_to_render:
            for image_url in item.images:
                self._platform.send_image(recipient_id=recipient_id, image_url=image_url, caption=item.display_name)
        return True
