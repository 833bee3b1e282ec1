"""Order aggregate (CQRS): a placed order with its customer, delivery and price snapshot.

Orders are immutable once placed, except for their status and tracking details.

State Machine:
    pending -> processing -> shipped -> delivered
    pending | processing -> cancelled
    any status except refunded -> refunded
Re-submitting the current status is accepted as a tracking update.
"""

import re
import time
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from storefront.domain import storefront
from storefront.order.events import OrderPlaced, OrderStatusChanged
from storefront.pricing import calculate_totals
from storefront.shared.options import SelectedOptions

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED, OrderStatus.REFUNDED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED, OrderStatus.REFUNDED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.REFUNDED},
    OrderStatus.DELIVERED: {OrderStatus.REFUNDED},
    OrderStatus.CANCELLED: {OrderStatus.REFUNDED},
    OrderStatus.REFUNDED: set(),  # Terminal
}


def generate_order_number(now_ms: int | None = None) -> str:
    """``ORD-`` followed by the last six digits of the millisecond clock."""
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"ORD-{str(now_ms)[-6:]}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class CustomerDetails:
    """Who placed the order, as given at checkout."""

    name = String(required=True, max_length=255)
    email = String(required=True, max_length=255)
    phone = String(max_length=50)

    @invariant.post
    def email_must_be_valid(self):
        if self.email and not _EMAIL_PATTERN.match(self.email):
            raise ValidationError({"email": ["Enter a valid email address"]})


@storefront.value_object(part_of="Order")
class DeliveryAddress:
    """Where the order ships to. Later address changes never touch a placed order."""

    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    zip_code = String(required=True, max_length=20)
    country = String(max_length=100, default="Pakistan")


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)  # Price at purchase time
    selected_options = ValueObject(SelectedOptions)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=50, unique=True)
    customer = ValueObject(CustomerDetails, required=True)
    shipping_address = ValueObject(DeliveryAddress, required=True)
    items = HasMany(OrderItem)
    subtotal = Float(default=0.0)
    tax = Float(default=0.0)
    shipping = Float(default=0.0)
    discount = Float(default=0.0)
    total = Float(default=0.0)
    currency = String(max_length=3, default="pkr")
    coupon_code = String(max_length=50)
    payment_intent_id = String(max_length=255)
    payment_customer_id = String(max_length=255)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    shipping_method = String(max_length=50, default="standard")
    tracking_number = String(max_length=255)
    estimated_delivery = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()
    notes = Text()
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer,
        shipping_address,
        items,
        order_number,
        status=OrderStatus.PENDING.value,
        coupon_code=None,
        currency="pkr",
        payment_intent_id=None,
        payment_customer_id=None,
        shipping_method=None,
        notes=None,
    ):
        """Record a new order and price it.

        Args:
            customer: CustomerDetails value object.
            shipping_address: DeliveryAddress value object.
            items: List of dicts with product_id, quantity, price and
                   optional selected_options (a SelectedOptions or None).
            order_number: Human-facing order number, see generate_order_number().
            status: Initial status; "pending" unless payment is already confirmed.
        """
        if not items:
            raise ValidationError({"items": ["An order must contain at least one item"]})

        totals = calculate_totals(
            [(item["price"], item["quantity"]) for item in items],
            coupon_code=coupon_code,
        )
        now = datetime.now(UTC)

        order = cls(
            order_number=order_number,
            customer=customer,
            shipping_address=shipping_address,
            subtotal=totals.subtotal,
            tax=totals.tax,
            shipping=totals.shipping,
            discount=totals.discount,
            total=totals.total,
            currency=(currency or "pkr").lower(),
            coupon_code=coupon_code.strip().upper() if coupon_code else None,
            payment_intent_id=payment_intent_id,
            payment_customer_id=payment_customer_id,
            status=OrderStatus(status).value,
            shipping_method=shipping_method or "standard",
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        for item in items:
            order.add_items(
                OrderItem(
                    product_id=str(item["product_id"]),
                    quantity=item["quantity"],
                    price=item["price"],
                    selected_options=item.get("selected_options"),
                )
            )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                status=order.status,
                total=order.total,
                currency=order.currency,
                item_count=sum(item["quantity"] for item in items),
                payment_intent_id=payment_intent_id,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def can_transition_to(self, new_status):
        current = OrderStatus(self.status)
        target = OrderStatus(new_status)
        return target == current or target in _VALID_TRANSITIONS[current]

    def _assert_can_transition(self, new_status):
        if not self.can_transition_to(new_status):
            raise ValidationError({"status": [f"Cannot transition from {self.status} to {new_status.value}"]})

    def change_status(self, status, tracking_number=None, estimated_delivery=None):
        """Move the order to ``status`` and record any tracking details supplied."""
        try:
            new_status = OrderStatus(status)
        except ValueError:
            raise ValidationError({"status": [f"Invalid order status '{status}'"]}) from None

        self._assert_can_transition(new_status)

        previous_status = self.status
        now = datetime.now(UTC)

        if new_status.value != previous_status:
            if new_status == OrderStatus.SHIPPED:
                self.shipped_at = now
            elif new_status == OrderStatus.DELIVERED:
                self.delivered_at = now

        self.status = new_status.value
        if tracking_number:
            self.tracking_number = tracking_number
        if estimated_delivery:
            self.estimated_delivery = estimated_delivery
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous_status,
                new_status=new_status.value,
                tracking_number=self.tracking_number,
            )
        )
