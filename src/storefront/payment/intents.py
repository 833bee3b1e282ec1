"""Payment intent creation.

Opening an intent touches no aggregate, so this is a plain application
service rather than a command: it validates the amount and hands it to the
processor in minor units.
"""

from protean.exceptions import ValidationError

from storefront.gateway import get_gateway
from storefront.gateway.port import PaymentIntent
from storefront.pricing import to_minor_units
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CURRENCY = "pkr"


def create_payment_intent(amount, currency: str | None = None, customer_email: str | None = None) -> PaymentIntent:
    """Open a payment intent for ``amount`` (in currency units, e.g. 2000.00)."""
    if amount is None or amount <= 0:
        raise ValidationError({"amount": ["Amount must be greater than 0"]})

    metadata = {}
    if customer_email:
        metadata["customer_email"] = customer_email

    intent = get_gateway().create_payment_intent(
        amount=to_minor_units(amount),
        currency=(currency or DEFAULT_CURRENCY).lower(),
        metadata=metadata,
    )
    logger.info("payment_intent_created", intent_id=intent.intent_id, amount=intent.amount, currency=intent.currency)
    return intent
