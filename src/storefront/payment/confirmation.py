"""Payment confirmation: turns a succeeded payment intent into an order.

The intent is re-fetched from the processor and must both have succeeded and
have charged exactly the order total before the order is placed. A payment
intent produces at most one order: confirming it again returns that order,
moving it out of pending if it was placed before the payment went through.
"""

from protean import handle
from protean.fields import String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import PaymentRejectedError
from storefront.gateway import get_gateway
from storefront.order.creation import load_order_payload, place_order
from storefront.order.order import Order, OrderStatus
from storefront.pricing import to_minor_units
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class ConfirmPayment:
    payment_intent_id = String(required=True, max_length=255)
    customer = Text(required=True)  # JSON: {name, email, phone}
    shipping_address = Text(required=True)  # JSON: {street, city, state, zip_code, country}
    items = Text(required=True)  # JSON: [{product_id, quantity, price, selected_options}, ...]
    coupon_code = String(max_length=50)
    shipping_method = String(max_length=50)
    notes = Text()
    session_id = String(max_length=255)


@storefront.command_handler(part_of=Order)
class ConfirmPaymentHandler:
    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        intent = get_gateway().retrieve_payment_intent(command.payment_intent_id)
        if not intent.succeeded:
            logger.warning("payment_not_succeeded", intent_id=intent.intent_id, status=intent.status)
            raise PaymentRejectedError({"payment_intent_id": ["Payment not completed"]})

        repo = current_domain.repository_for(Order)
        existing = repo.find_by_payment_intent(intent.intent_id)
        if existing is not None:
            return self._confirm_existing(repo, existing, intent)

        customer, shipping_address, items = load_order_payload(command)

        order = place_order(
            customer=customer,
            shipping_address=shipping_address,
            items=items,
            status=OrderStatus.PROCESSING.value,
            coupon_code=command.coupon_code,
            payment_intent_id=intent.intent_id,
            payment_customer_id=intent.customer_id,
            currency=intent.currency,
            shipping_method=command.shipping_method,
            notes=command.notes,
            session_id=command.session_id,
            expected_amount=intent.amount,
        )
        return str(order.id)

    @staticmethod
    def _confirm_existing(repo, order, intent):
        """Confirm an order already placed with this intent instead of placing another."""
        if to_minor_units(order.total) != intent.amount:
            raise PaymentRejectedError(
                {"amount": [f"Paid amount {intent.amount} does not match order total {to_minor_units(order.total)}"]}
            )
        if order.status == OrderStatus.PENDING.value:
            order.change_status(OrderStatus.PROCESSING.value)
            repo.add(order)
        logger.info(
            "payment_already_confirmed", intent_id=intent.intent_id, order_id=str(order.id), status=order.status
        )
        return str(order.id)
