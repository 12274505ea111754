"""StripePaymentGateway — confirms a PaymentIntent through the Stripe REST API.

Requests are form-encoded and carry an Idempotency-Key header, so a retry
with the same key returns the original intent instead of charging twice.
"""

import logging

import httpx

from src.cm_payment.domain.gateway import PaymentGatewayError, PaymentRequest, PaymentResult

logger = logging.getLogger(__name__)


def _form_fields(request: PaymentRequest) -> dict[str, str]:
    fields = {
        "amount": str(request.amount_minor_units),
        "currency": request.currency,
        "payment_method": request.payment_method,
        "confirm": "true",
        # Server-side confirmation: no redirect-based payment methods
        "automatic_payment_methods[enabled]": "true",
        "automatic_payment_methods[allow_redirects]": "never",
    }
    if request.description:
        fields["description"] = request.description
    for key, value in request.metadata.items():
        fields[f"metadata[{key}]"] = value
    return fields


class StripePaymentGateway:
    def __init__(
        self,
        secret_key: str,
        base_url: str = "https://api.stripe.com",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._secret_key = secret_key
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport

    async def charge(self, request: PaymentRequest) -> PaymentResult:
        if not self._secret_key:
            raise PaymentGatewayError("STRIPE_SECRET_KEY is not configured")

        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    "/v1/payment_intents",
                    data=_form_fields(request),
                    headers={
                        "Authorization": f"Bearer {self._secret_key}",
                        "Idempotency-Key": request.idempotency_key,
                    },
                )
        except httpx.HTTPError as exc:
            raise PaymentGatewayError(f"Payment transport error: {exc}") from exc

        try:
            payload = resp.json()
        except ValueError:
            payload = {}

        if resp.status_code >= 400:
            error = payload.get("error") or {}
            message = error.get("message") or f"HTTP {resp.status_code}"
            logger.warning(
                "Stripe rejected charge: key=%s status=%d code=%s",
                request.idempotency_key, resp.status_code, error.get("code"),
            )
            raise PaymentGatewayError(message)

        return PaymentResult(
            intent_id=str(payload.get("id", "")),
            status=str(payload.get("status", "")),
            amount_minor_units=int(payload.get("amount", request.amount_minor_units)),
            currency=str(payload.get("currency", request.currency)),
            raw=payload,
        )
