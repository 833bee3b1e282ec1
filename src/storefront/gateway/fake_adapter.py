"""Configurable fake payment gateway for development and testing.

This adapter simulates the card processor without any external calls.
It can be configured at runtime to accept or refuse payments, making it useful for:
- Manual API testing via /payments/gateway/configure
- Automated tests with predictable outcomes
- Development without real processor credentials

Webhooks are signed the way Stripe signs them: the ``stripe-signature``
header carries ``t=<unix timestamp>,v1=<hex HMAC-SHA256 of "<t>.<payload>">``
keyed with the shared webhook secret.
"""

import hashlib
import hmac
import json
import time
from uuid import uuid4

from storefront.exceptions import PaymentRejectedError
from storefront.gateway.port import PaymentGateway, PaymentIntent, WebhookEvent

SIGNATURE_TOLERANCE_SECONDS = 300


def compute_signature(secret: str, timestamp: int, payload: bytes) -> str:
    signed_payload = f"{timestamp}.".encode() + payload
    return hmac.new(secret.encode(), signed_payload, hashlib.sha256).hexdigest()


def parse_signature_header(header: str) -> tuple[int, list[str]]:
    timestamp = None
    signatures = []
    for part in header.split(","):
        key, _, value = part.strip().partition("=")
        if key == "t":
            timestamp = int(value)
        elif key == "v1":
            signatures.append(value)
    if timestamp is None or not signatures:
        raise ValueError("Signature header is missing a timestamp or signature")
    return timestamp, signatures


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self, webhook_secret: str = "whsec_test") -> None:
        self.webhook_secret = webhook_secret
        self.should_succeed: bool = True
        self.auto_confirm: bool = True
        self.failure_reason: str = "Card declined"
        self.intents: dict[str, PaymentIntent] = {}
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Card declined", auto_confirm: bool = True) -> None:
        """Configure gateway behavior at runtime.

        ``should_succeed=False`` makes the processor refuse new intents.
        ``auto_confirm`` reports new intents as already paid, standing in for
        the shopper confirming the card on the client.
        """
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.auto_confirm = auto_confirm

    def create_payment_intent(self, amount: int, currency: str, metadata: dict | None = None) -> PaymentIntent:
        self.calls.append(
            {
                "method": "create_payment_intent",
                "amount": amount,
                "currency": currency,
                "metadata": metadata or {},
            }
        )

        if not self.should_succeed:
            raise PaymentRejectedError({"payment": [self.failure_reason]})

        intent_id = f"pi_fake_{uuid4().hex[:16]}"
        intent = PaymentIntent(
            intent_id=intent_id,
            client_secret=f"{intent_id}_secret_{uuid4().hex[:16]}",
            status="succeeded" if self.auto_confirm else "requires_payment_method",
            amount=amount,
            currency=currency,
            customer_id=f"cus_fake_{uuid4().hex[:12]}",
            metadata=dict(metadata or {}),
        )
        self.intents[intent_id] = intent
        return intent

    def retrieve_payment_intent(self, intent_id: str) -> PaymentIntent:
        self.calls.append({"method": "retrieve_payment_intent", "intent_id": intent_id})

        intent = self.intents.get(intent_id)
        if intent is None:
            raise PaymentRejectedError({"payment_intent_id": [f"No such payment intent: {intent_id}"]})
        return intent

    def set_intent_status(self, intent_id: str, status: str) -> PaymentIntent:
        """Move a stored intent to ``status``, as the processor would after card confirmation."""
        intent = self.retrieve_payment_intent(intent_id)
        updated = PaymentIntent(
            intent_id=intent.intent_id,
            client_secret=intent.client_secret,
            status=status,
            amount=intent.amount,
            currency=intent.currency,
            customer_id=intent.customer_id,
            metadata=intent.metadata,
        )
        self.intents[intent_id] = updated
        return updated

    # -------------------------------------------------------------------
    # Webhooks
    # -------------------------------------------------------------------
    def sign_payload(self, payload: bytes, timestamp: int | None = None) -> str:
        """Build the signature header for ``payload``."""
        timestamp = int(time.time()) if timestamp is None else timestamp
        return f"t={timestamp},v1={compute_signature(self.webhook_secret, timestamp, payload)}"

    @staticmethod
    def build_event_payload(event_type: str, intent_id: str, metadata: dict | None = None) -> bytes:
        """Build a webhook body shaped like the processor's."""
        event = {
            "id": f"evt_fake_{uuid4().hex[:16]}",
            "type": event_type,
            "data": {"object": {"id": intent_id, "object": "payment_intent", "metadata": metadata or {}}},
        }
        return json.dumps(event).encode()

    def construct_webhook_event(self, payload: bytes, signature: str | None) -> WebhookEvent:
        self.calls.append({"method": "construct_webhook_event"})

        if not signature:
            raise PaymentRejectedError({"signature": ["Missing webhook signature"]})
        try:
            timestamp, signatures = parse_signature_header(signature)
        except ValueError:
            raise PaymentRejectedError({"signature": ["Malformed webhook signature"]}) from None

        expected = compute_signature(self.webhook_secret, timestamp, payload)
        if not any(hmac.compare_digest(expected, candidate) for candidate in signatures):
            raise PaymentRejectedError({"signature": ["Webhook signature verification failed"]})
        if abs(time.time() - timestamp) > SIGNATURE_TOLERANCE_SECONDS:
            raise PaymentRejectedError({"signature": ["Webhook timestamp outside the tolerance zone"]})

        try:
            event = json.loads(payload)
            data_object = event.get("data", {}).get("object", {})
            return WebhookEvent(
                event_id=event["id"],
                event_type=event["type"],
                payment_intent_id=data_object.get("id"),
                metadata=dict(data_object.get("metadata") or {}),
            )
        except (ValueError, KeyError, AttributeError):
            raise PaymentRejectedError({"payload": ["Invalid webhook payload"]}) from None
