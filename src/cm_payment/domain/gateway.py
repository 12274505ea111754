"""Payment collaborator contract.

The gateway charges one amount in minor units and reports the provider's
outcome. Transport or provider rejections raise PaymentGatewayError; a
charge the provider accepted but did not complete comes back as a
PaymentResult whose `succeeded` is False.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol


class PaymentGatewayError(Exception):
    """The payment provider could not be reached or refused the charge."""


@dataclass(frozen=True)
class PaymentRequest:
    amount_minor_units: int
    currency: str
    payment_method: str
    idempotency_key: str
    description: str = ""
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PaymentResult:
    intent_id: str
    status: str
    amount_minor_units: int
    currency: str
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"


class PaymentGatewayProtocol(Protocol):
    async def charge(self, request: PaymentRequest) -> PaymentResult: ...
