"""Storefront-specific domain errors.

Each error extends the Protean exception it is reported as, so the API layer
maps it to an HTTP status without knowing about the storefront.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class ProductUnavailableError(ObjectNotFoundError):
    """The product exists but is not active for sale."""


class InsufficientStockError(ValidationError):
    """Requested quantity exceeds the product's available stock."""


class PaymentRejectedError(ValidationError):
    """The payment processor refused the payment, or its message could not be trusted."""
