"""Storefront bounded context: Catalogue, Shopping Cart, Orders and Payments.

Handles the session-scoped shopping cart and its pricing, order placement with
stock decrement, and the bridge to the card payment processor.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

storefront = Domain(name="storefront")
