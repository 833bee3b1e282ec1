"""Payment gateway port (abstract interface).

Defines the contract the checkout flow needs from a card payment processor.
This enables swapping between FakeGateway (dev/test) and StripeGateway
(production) without changing any domain or application code.

Amounts cross this boundary in integer minor units.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class PaymentIntent:
    """The processor's handle on an in-progress charge."""

    intent_id: str
    client_secret: str
    status: str
    amount: int
    currency: str
    customer_id: str | None = None
    metadata: dict = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"


@dataclass(frozen=True)
class WebhookEvent:
    """A verified notification pushed by the processor."""

    event_id: str
    event_type: str
    payment_intent_id: str | None = None
    metadata: dict = field(default_factory=dict)


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_payment_intent(self, amount: int, currency: str, metadata: dict | None = None) -> PaymentIntent:
        """Open a payment intent for ``amount`` minor units."""
        ...

    @abstractmethod
    def retrieve_payment_intent(self, intent_id: str) -> PaymentIntent:
        """Fetch the current state of a payment intent."""
        ...

    @abstractmethod
    def construct_webhook_event(self, payload: bytes, signature: str | None) -> WebhookEvent:
        """Verify a webhook payload against its signature header and parse it.

        Raises PaymentRejectedError when the signature does not check out.
        """
        ...
