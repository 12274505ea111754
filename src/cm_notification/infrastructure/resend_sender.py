"""ResendEmailSender — delivers email through the Resend HTTP API."""

import logging
from typing import Any

import httpx

from src.cm_notification.application.templates import render_html
from src.cm_notification.domain.sender import NotificationError

logger = logging.getLogger(__name__)


class ResendEmailSender:
    def __init__(
        self,
        api_key: str,
        from_address: str,
        base_url: str = "https://api.resend.com",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._from_address = from_address
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport

    async def send(
        self, to_address: str, subject: str, template_data: dict[str, Any]
    ) -> str:
        """Send one email, returning the provider message id."""
        if not self._api_key:
            raise NotificationError("RESEND_API_KEY is not configured")

        body = {
            "from": self._from_address,
            "to": [to_address],
            "subject": subject,
            "html": render_html(template_data),
        }
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    "/emails",
                    json=body,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
        except httpx.HTTPError as exc:
            raise NotificationError(f"Email transport error: {exc}") from exc

        if resp.status_code >= 400:
            raise NotificationError(
                f"Email provider rejected message: {resp.status_code} {resp.text}"
            )
        message_id = str(resp.json().get("id", ""))
        logger.info("Email sent: to=%s id=%s", to_address, message_id)
        return message_id
