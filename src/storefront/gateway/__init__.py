"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- StripeGateway when STRIPE_SECRET_KEY is configured (STRIPE_WEBHOOK_SECRET is then required)
- FakeGateway for development and testing otherwise
"""

import os

from protean.exceptions import ConfigurationError

from storefront.gateway.fake_adapter import FakeGateway
from storefront.gateway.port import PaymentGateway
from storefront.gateway.stripe_adapter import StripeGateway

_current_gateway: PaymentGateway | None = None

DEFAULT_WEBHOOK_SECRET = "whsec_test"


def _build_default_gateway() -> PaymentGateway:
    webhook_secret = os.getenv("STRIPE_WEBHOOK_SECRET")
    api_key = os.getenv("STRIPE_SECRET_KEY")
    if api_key:
        if not webhook_secret:
            raise ConfigurationError("STRIPE_WEBHOOK_SECRET must be set when STRIPE_SECRET_KEY is configured")
        return StripeGateway(api_key=api_key, webhook_secret=webhook_secret)
    return FakeGateway(webhook_secret=webhook_secret or DEFAULT_WEBHOOK_SECRET)


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, building the configured default on first use."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _build_default_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
