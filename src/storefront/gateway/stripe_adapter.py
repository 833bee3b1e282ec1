"""Stripe payment gateway adapter, backed by the stripe-python SDK."""

import json

import stripe
from protean.exceptions import ConfigurationError

from storefront.exceptions import PaymentRejectedError
from storefront.gateway.port import PaymentGateway, PaymentIntent, WebhookEvent
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _to_intent(intent) -> PaymentIntent:
    return PaymentIntent(
        intent_id=intent.id,
        client_secret=intent.client_secret,
        status=intent.status,
        amount=intent.amount,
        currency=intent.currency,
        customer_id=intent.customer,
        metadata=dict(intent.metadata or {}),
    )


class StripeGateway(PaymentGateway):
    """Production Stripe gateway adapter."""

    def __init__(self, api_key: str, webhook_secret: str) -> None:
        if not webhook_secret:
            raise ConfigurationError("Stripe webhooks cannot be verified without a webhook signing secret")
        self.api_key = api_key
        self.webhook_secret = webhook_secret

    def create_payment_intent(self, amount: int, currency: str, metadata: dict | None = None) -> PaymentIntent:
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount,
                currency=currency,
                metadata=metadata or {},
                automatic_payment_methods={"enabled": True},
                api_key=self.api_key,
            )
        except stripe.StripeError as exc:
            logger.warning("stripe_create_intent_failed", error=str(exc))
            raise PaymentRejectedError({"payment": [exc.user_message or "Payment processor error"]}) from exc
        return _to_intent(intent)

    def retrieve_payment_intent(self, intent_id: str) -> PaymentIntent:
        try:
            intent = stripe.PaymentIntent.retrieve(intent_id, api_key=self.api_key)
        except stripe.StripeError as exc:
            logger.warning("stripe_retrieve_intent_failed", intent_id=intent_id, error=str(exc))
            raise PaymentRejectedError({"payment_intent_id": [exc.user_message or "Payment processor error"]}) from exc
        return _to_intent(intent)

    def construct_webhook_event(self, payload: bytes, signature: str | None) -> WebhookEvent:
        if not signature:
            raise PaymentRejectedError({"signature": ["Missing webhook signature"]})
        body = payload.decode("utf-8") if isinstance(payload, bytes) else payload
        try:
            stripe.WebhookSignature.verify_header(body, signature, self.webhook_secret)
        except stripe.SignatureVerificationError:
            raise PaymentRejectedError({"signature": ["Webhook signature verification failed"]}) from None

        try:
            event = json.loads(body)
            data_object = event.get("data", {}).get("object", {})
            return WebhookEvent(
                event_id=event["id"],
                event_type=event["type"],
                payment_intent_id=data_object.get("id"),
                metadata=dict(data_object.get("metadata") or {}),
            )
        except (ValueError, KeyError, AttributeError):
            raise PaymentRejectedError({"payload": ["Invalid webhook payload"]}) from None
