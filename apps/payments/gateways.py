"""Payment gateway adapters.

``get_gateway()`` returns the adapter named by ``PAYMENT_GATEWAY``: Stripe
PaymentIntents in production, an in-process emulation for development and
tests.
"""

from __future__ import annotations

import json
import logging
import uuid
from decimal import Decimal
from typing import Any

import stripe  # type: ignore
from django.conf import settings  # type: ignore

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Raised when the payment provider rejects or fails a request."""


class InvalidSignature(GatewayError):
    pass


def to_minor_units(amount: Decimal | float | int) -> int:
    return int(round(Decimal(str(amount)) * 100))


def _plain(obj: Any) -> dict[str, Any]:
    if not obj:
        return {}
    return {key: obj[key] for key in obj.keys()}


def _intent_dict(intent: Any) -> dict[str, Any]:
    def field(key: str, default: Any = None) -> Any:
        return intent[key] if key in intent and intent[key] is not None else default

    error = field("last_payment_error")
    return {
        "id": field("id", ""),
        "status": field("status", ""),
        "amount": Decimal(field("amount", 0)) / 100,
        "currency": field("currency", ""),
        "payment_method": field("payment_method", ""),
        "metadata": _plain(field("metadata")),
        "last_error": error["message"] if error and "message" in error else "",
    }


class StripeGateway:
    name = "stripe"

    def __init__(self, api_key: str | None = None, webhook_secret: str | None = None) -> None:
        stripe.api_key = api_key or settings.STRIPE_SECRET_KEY
        self.webhook_secret = webhook_secret or settings.STRIPE_WEBHOOK_SECRET

    def create_payment_intent(self, amount: Decimal, currency: str, metadata: dict[str, Any]) -> dict[str, Any]:
        try:
            intent = stripe.PaymentIntent.create(
                amount=to_minor_units(amount),
                currency=currency.lower(),
                metadata={key: str(value) for key, value in metadata.items()},
                automatic_payment_methods={"enabled": True},
            )
        except stripe.StripeError as exc:
            logger.error("Stripe intent creation failed: %s", exc, exc_info=True)
            raise GatewayError("Failed to create payment intent.") from exc
        logger.info("Payment intent %s created for %s %s", intent.id, amount, currency)
        return {"id": intent.id, "client_secret": intent.client_secret}

    def retrieve(self, intent_id: str) -> dict[str, Any]:
        try:
            intent = stripe.PaymentIntent.retrieve(intent_id)
        except stripe.StripeError as exc:
            logger.error("Stripe intent retrieval failed: %s", exc, exc_info=True)
            raise GatewayError("Failed to retrieve payment intent.") from exc
        return _intent_dict(intent)

    def refund(self, intent_id: str, reason: str = "requested_by_customer") -> dict[str, Any]:
        try:
            refund = stripe.Refund.create(payment_intent=intent_id, reason=reason)
        except stripe.StripeError as exc:
            logger.error("Stripe refund failed for %s: %s", intent_id, exc, exc_info=True)
            raise GatewayError("Failed to process refund.") from exc
        return {"id": refund.id, "status": refund.status}

    def verify_webhook(self, payload: bytes, signature: str) -> dict[str, Any]:
        try:
            event = stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except ValueError as exc:
            raise InvalidSignature("Invalid payload.") from exc
        except stripe.SignatureVerificationError as exc:
            raise InvalidSignature("Invalid signature.") from exc
        return {"type": event["type"], "data": {"object": _intent_dict(event["data"]["object"])}}


class DummyGateway:
    """In-memory emulation; intents succeed as soon as they are retrieved."""

    name = "dummy"
    _intents: dict[str, dict[str, Any]] = {}

    def create_payment_intent(self, amount: Decimal, currency: str, metadata: dict[str, Any]) -> dict[str, Any]:
        intent_id = f"pi_dummy_{uuid.uuid4().hex[:16]}"
        self._intents[intent_id] = {
            "id": intent_id,
            "status": "requires_payment_method",
            "amount": Decimal(str(amount)),
            "currency": currency.lower(),
            "payment_method": "card",
            "metadata": {key: str(value) for key, value in metadata.items()},
            "last_error": "",
        }
        logger.warning("Dummy payment intent %s created for %s %s", intent_id, amount, currency)
        return {"id": intent_id, "client_secret": f"{intent_id}_secret_{uuid.uuid4().hex[:8]}"}

    def retrieve(self, intent_id: str) -> dict[str, Any]:
        intent = self._intents.get(intent_id)
        if intent is None:
            raise GatewayError("Payment intent not found.")
        if intent["status"] == "requires_payment_method":
            intent["status"] = "succeeded"
        return dict(intent)

    def refund(self, intent_id: str, reason: str = "requested_by_customer") -> dict[str, Any]:
        intent = self._intents.get(intent_id)
        if intent is None:
            raise GatewayError("Payment intent not found.")
        intent["status"] = "refunded"
        return {"id": f"re_dummy_{uuid.uuid4().hex[:12]}", "status": "succeeded"}

    def verify_webhook(self, payload: bytes, signature: str) -> dict[str, Any]:
        if not signature or signature != settings.STRIPE_WEBHOOK_SECRET:
            raise InvalidSignature("Invalid signature.")
        try:
            return json.loads(payload)
        except ValueError as exc:
            raise InvalidSignature("Invalid payload.") from exc


GATEWAYS = {
    StripeGateway.name: StripeGateway,
    DummyGateway.name: DummyGateway,
}


def get_gateway():
    try:
        return GATEWAYS[settings.PAYMENT_GATEWAY]()
    except KeyError as exc:
        raise GatewayError(f"Unknown payment gateway {settings.PAYMENT_GATEWAY!r}.") from exc
