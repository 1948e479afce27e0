from __future__ import annotations

import logging
from typing import Any

import httpx

from app.application.exceptions import MessageDeliveryError


class WhatsAppClient:
    """Minimal WhatsApp Cloud API client for outbound text and image messages."""

    def __init__(
        self,
        access_token: str,
        phone_number_id: str,
        api_version: str = "v20.0",
        timeout_seconds: float = 10.0,
        max_retries: int = 2,
        base_url: str = "https://graph.facebook.com",
        http_client: httpx.Client | None = None,
    ) -> None:
        self._send_endpoint = f"{base_url}/{api_version}/{phone_number_id}/messages"
        self._headers = {"Authorization": f"Bearer {access_token}"}
        self._max_retries = max_retries
        self._client = http_client or httpx.Client(timeout=timeout_seconds)
        self._logger = logging.getLogger(__name__)

    def send_text(self, recipient_id: str, text: str) -> None:
        payload = {
            "messaging_product": "whatsapp",
            "to": recipient_id,
            "type": "text",
            "text": {"body": text},
        }
        self._post(payload, recipient_id)

    def send_image(self, recipient_id: str, image_url: str, caption: str = "") -> None:
        payload = {
            "messaging_product": "whatsapp",
            "to": recipient_id,
            "type": "image",
            "image": {"link": image_url, "caption": caption},
        }
        self._post(payload, recipient_id)

    def _post(self, payload: dict[str, Any], recipient_id: str) -> None:
        attempts = self._max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                resp = self._client.post(self._send_endpoint, headers=self._headers, json=payload)
            except httpx.TransportError as e:
                self._logger.warning(
                    "WhatsApp send transport error",
                    extra={"identifier": recipient_id, "attempt": attempt, "error": str(e)},
                )
                if attempt == attempts:
                    raise MessageDeliveryError(f"WhatsApp send failed after {attempts} attempts: {e}") from e
                continue

            if resp.status_code < 400:
                return

            error_code, error_message = _parse_error(resp)
            self._logger.error(
                "WhatsApp send failed",
                extra={
                    "status": resp.status_code,
                    "error_code": error_code,
                    "error_message": error_message,
                    "identifier": recipient_id,
                    "attempt": attempt,
                },
            )
            # Client errors will not succeed on retry
            if resp.status_code < 500 or attempt == attempts:
                raise MessageDeliveryError(f"WhatsApp send failed with status {resp.status_code}: {error_message}")


def _parse_error(resp: httpx.Response) -> tuple[Any, str]:
    try:
        error = resp.json().get("error", {})
        return error.get("code"), error.get("message") or resp.text
    except ValueError:
        return None, resp.text
