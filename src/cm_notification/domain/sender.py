"""Notification collaborator contract.

Implementations deliver one rendered email; failures raise
NotificationError so callers can decide whether delivery is best-effort.
"""

from typing import Any, Protocol


class NotificationError(Exception):
    """Email could not be delivered."""


class EmailSenderProtocol(Protocol):
    async def send(
        self, to_address: str, subject: str, template_data: dict[str, Any]
    ) -> str: ...
