"""Order placement: command, handler and the placement flow shared with payment confirmation.

Placing an order checks every product and its stock, prices the order,
records it, takes the ordered quantities out of stock and clears the
shopper's cart. All of this happens inside the command's unit of work, so the
order, the products and the cart are committed together or not at all.
"""

import json
import time
from collections import defaultdict

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.exceptions import PaymentRejectedError
from storefront.order.order import (
    CustomerDetails,
    DeliveryAddress,
    Order,
    OrderStatus,
    generate_order_number,
)
from storefront.pricing import to_minor_units
from storefront.shared.options import SelectedOptions
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    customer = Text(required=True)  # JSON: {name, email, phone}
    shipping_address = Text(required=True)  # JSON: {street, city, state, zip_code, country}
    items = Text(required=True)  # JSON: [{product_id, quantity, price, selected_options}, ...]
    coupon_code = String(max_length=50)
    order_number = String(max_length=50)
    payment_intent_id = String(max_length=255)
    payment_customer_id = String(max_length=255)
    currency = String(max_length=3, default="pkr")
    shipping_method = String(max_length=50)
    notes = Text()
    session_id = String(max_length=255)  # Cart to clear once the order is placed


def _parse_items(items):
    lines = []
    for index, item in enumerate(items):
        product_id = item.get("product_id")
        quantity = item.get("quantity")
        if not product_id:
            raise ValidationError({"items": [f"Item {index + 1} is missing a product"]})
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise ValidationError({"items": [f"Item {index + 1} must have a quantity of at least 1"]})
        lines.append(
            {
                "product_id": str(product_id),
                "quantity": quantity,
                "price": item.get("price"),
                "selected_options": SelectedOptions.from_dict(item.get("selected_options")),
            }
        )
    return lines


def load_order_payload(command):
    """Decode the JSON customer, address and items carried by an order-placing command."""
    try:
        customer = json.loads(command.customer)
        shipping_address = json.loads(command.shipping_address)
        items = json.loads(command.items)
    except (json.JSONDecodeError, TypeError):
        raise ValidationError({"order": ["Order payload must be valid JSON"]}) from None

    if not isinstance(customer, dict) or not isinstance(shipping_address, dict) or not isinstance(items, list):
        raise ValidationError({"order": ["Order payload is malformed"]})
    return customer, shipping_address, items


def _next_order_number(repo):
    """Generate an order number that no other order carries yet."""
    now_ms = int(time.time() * 1000)
    order_number = generate_order_number(now_ms)
    while repo.find_by_number(order_number) is not None:
        now_ms += 1
        order_number = generate_order_number(now_ms)
    return order_number


def place_order(
    customer,
    shipping_address,
    items,
    status=OrderStatus.PENDING.value,
    coupon_code=None,
    order_number=None,
    payment_intent_id=None,
    payment_customer_id=None,
    currency="pkr",
    shipping_method=None,
    notes=None,
    session_id=None,
    expected_amount=None,
):
    """Place an order from plain data and take its stock out of the catalogue.

    Args:
        customer: Dict with name, email and phone.
        shipping_address: Dict with street, city, state, zip_code and country.
        items: List of dicts with product_id, quantity and optional price and
               selected_options. A missing price means the current product price.
        expected_amount: When given, the amount already charged in minor units;
                         the order total must match it exactly.
        session_id: When given, that session's cart is cleared.

    Must run inside a unit of work: callers are command handlers.
    """
    lines = _parse_items(items)
    if not lines:
        raise ValidationError({"items": ["An order must contain at least one item"]})

    product_repo = current_domain.repository_for(Product)
    order_repo = current_domain.repository_for(Order)

    products = {}
    requested = defaultdict(int)
    for line in lines:
        product_id = line["product_id"]
        if product_id not in products:
            products[product_id] = product_repo.get(product_id)
        requested[product_id] += line["quantity"]

    for product_id, quantity in requested.items():
        products[product_id].ensure_in_stock(quantity)

    for line in lines:
        if line["price"] is None:
            line["price"] = products[line["product_id"]].price

    order = Order.place(
        customer=CustomerDetails(
            name=customer.get("name"),
            email=customer.get("email"),
            phone=customer.get("phone"),
        ),
        shipping_address=DeliveryAddress(
            **{
                key: shipping_address.get(key)
                for key in ("street", "city", "state", "zip_code", "country")
                if shipping_address.get(key) is not None
            }
        ),
        items=lines,
        order_number=order_number or _next_order_number(order_repo),
        status=status,
        coupon_code=coupon_code,
        currency=currency,
        payment_intent_id=payment_intent_id,
        payment_customer_id=payment_customer_id,
        shipping_method=shipping_method,
        notes=notes,
    )

    if expected_amount is not None and expected_amount != to_minor_units(order.total):
        raise PaymentRejectedError(
            {"amount": [f"Paid amount {expected_amount} does not match order total {to_minor_units(order.total)}"]}
        )

    order_repo.add(order)

    for product_id, quantity in requested.items():
        product = products[product_id]
        product.decrement_stock(quantity)
        product_repo.add(product)

    if session_id:
        cart_repo = current_domain.repository_for(ShoppingCart)
        cart = cart_repo.for_session(session_id)
        if cart is not None:
            cart.clear()
            cart_repo.add(cart)

    logger.info(
        "order_placed",
        order_id=str(order.id),
        order_number=order.order_number,
        status=order.status,
        total=order.total,
    )
    return order


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_new_order(self, command):
        customer, shipping_address, items = load_order_payload(command)

        order = place_order(
            customer=customer,
            shipping_address=shipping_address,
            items=items,
            coupon_code=command.coupon_code,
            order_number=command.order_number,
            payment_intent_id=command.payment_intent_id,
            payment_customer_id=command.payment_customer_id,
            currency=command.currency,
            shipping_method=command.shipping_method,
            notes=command.notes,
            session_id=command.session_id,
        )
        return str(order.id)
