"""Webhook notifier that forwards submissions to the order intake hook."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)

# Default timeout (in seconds) for webhook requests.
DEFAULT_TIMEOUT = 30


class WebhookError(RuntimeError):
    """The webhook could not be reached or answered with a non-2xx status."""

    def __init__(self, message: str, status: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


@dataclass
class WebhookNotifier:
    """Posts JSON payloads to a single webhook URL, once."""

    url: str
    timeout: float = DEFAULT_TIMEOUT
    transport: httpx.BaseTransport | None = None

    def __post_init__(self) -> None:
        if not (self.url or "").strip():
            raise RuntimeError("Webhook URL is required.")
        self.url = self.url.strip()

    def send(self, payload: dict[str, Any]) -> int:
        """POST ``payload`` and return the upstream status code."""

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(self.url, json=payload)
        except httpx.HTTPError as exc:
            logger.error("Failed to reach webhook: %s", exc)
            raise WebhookError("Failed to reach webhook") from exc

        if not response.is_success:
            logger.error("Webhook answered %s", response.status_code)
            raise WebhookError(
                "Webhook error",
                status=response.status_code,
                body=response.text or "",
            )

        logger.info("Webhook accepted submission (%s)", response.status_code)
        return response.status_code
