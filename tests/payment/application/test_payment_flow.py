"""Application tests for payment intents, payment confirmation and webhooks."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from storefront.cart.cart import ShoppingCart
from storefront.cart.items import AddToCart
from storefront.catalogue.product import Product
from storefront.exceptions import PaymentRejectedError
from storefront.gateway import get_gateway
from storefront.order.creation import PlaceOrder
from storefront.order.order import Order
from storefront.payment.confirmation import ConfirmPayment
from storefront.payment.intents import create_payment_intent
from storefront.payment.webhook import PAYMENT_FAILED, PAYMENT_SUCCEEDED, ProcessPaymentWebhook

CUSTOMER = {"name": "Ayesha Khan", "email": "ayesha@example.com"}
ADDRESS = {"street": "12 Mall Road", "city": "Lahore", "state": "Punjab", "zip_code": "54000"}


def _add_product(price=1000, stock=5):
    product = Product.create(
        name="Gold Ring",
        description="A classic gold ring.",
        price=price,
        category="rings",
        material="Gold",
        stock=stock,
    )
    current_domain.repository_for(Product).add(product)
    return product


def _confirm(intent_id, product, quantity=2, **kwargs):
    command = ConfirmPayment(
        payment_intent_id=intent_id,
        customer=json.dumps(CUSTOMER),
        shipping_address=json.dumps(ADDRESS),
        items=json.dumps([{"product_id": str(product.id), "quantity": quantity}]),
        **kwargs,
    )
    return current_domain.process(command, asynchronous=False)


def _pending_order(product, payment_intent_id="pi_pending"):
    command = PlaceOrder(
        customer=json.dumps(CUSTOMER),
        shipping_address=json.dumps(ADDRESS),
        items=json.dumps([{"product_id": str(product.id), "quantity": 1}]),
        payment_intent_id=payment_intent_id,
    )
    return current_domain.process(command, asynchronous=False)


class TestCreatePaymentIntent:
    def test_amount_goes_to_processor_in_minor_units(self):
        intent = create_payment_intent(2200, customer_email="ayesha@example.com")

        assert intent.amount == 220000
        assert intent.currency == "pkr"
        assert intent.client_secret
        call = get_gateway().calls[-1]
        assert call["metadata"] == {"customer_email": "ayesha@example.com"}

    def test_currency_is_lowercased(self):
        assert create_payment_intent(10.5, currency="USD").currency == "usd"

    @pytest.mark.parametrize("amount", [0, -5, None])
    def test_non_positive_amount_is_rejected(self, amount):
        with pytest.raises(ValidationError) as exc:
            create_payment_intent(amount)
        assert exc.value.messages == {"amount": ["Amount must be greater than 0"]}
        assert get_gateway().calls == []

    def test_processor_refusal(self):
        get_gateway().configure(should_succeed=False, failure_reason="Card declined")
        with pytest.raises(PaymentRejectedError):
            create_payment_intent(2200)


class TestConfirmPayment:
    def test_confirmed_payment_places_processing_order(self):
        product = _add_product(price=1000, stock=5)
        intent = create_payment_intent(2200)

        order_id = _confirm(intent.intent_id, product)

        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == "processing"
        assert order.payment_intent_id == intent.intent_id
        assert order.payment_customer_id == intent.customer_id
        assert order.total == 2200
        assert current_domain.repository_for(Product).get(product.id).stock == 3

    def test_confirmation_re_fetches_the_intent(self):
        product = _add_product()
        intent = create_payment_intent(2200)
        _confirm(intent.intent_id, product)
        assert {"method": "retrieve_payment_intent", "intent_id": intent.intent_id} in get_gateway().calls

    def test_unpaid_intent_is_rejected(self):
        product = _add_product(stock=5)
        get_gateway().configure(should_succeed=True, auto_confirm=False)
        intent = create_payment_intent(2200)

        with pytest.raises(PaymentRejectedError) as exc:
            _confirm(intent.intent_id, product)
        assert exc.value.messages == {"payment_intent_id": ["Payment not completed"]}
        assert current_domain.repository_for(Product).get(product.id).stock == 5

    def test_intent_confirmed_later_is_accepted(self):
        product = _add_product()
        get_gateway().configure(should_succeed=True, auto_confirm=False)
        intent = create_payment_intent(2200)
        get_gateway().set_intent_status(intent.intent_id, "succeeded")

        order_id = _confirm(intent.intent_id, product)
        assert current_domain.repository_for(Order).get(order_id).status == "processing"

    def test_confirming_twice_places_one_order(self):
        product = _add_product(price=1000, stock=5)
        intent = create_payment_intent(2200)

        first = _confirm(intent.intent_id, product)
        second = _confirm(intent.intent_id, product)

        assert second == first
        assert current_domain.repository_for(Order)._dao.query.all().total == 1
        assert current_domain.repository_for(Product).get(product.id).stock == 3

    def test_confirming_a_pending_order_moves_it_to_processing(self):
        product = _add_product(price=1000, stock=5)
        intent = create_payment_intent(1200)
        order_id = _pending_order(product, payment_intent_id=intent.intent_id)

        assert _confirm(intent.intent_id, product, quantity=1) == order_id

        assert current_domain.repository_for(Order).get(order_id).status == "processing"
        assert current_domain.repository_for(Order)._dao.query.all().total == 1
        assert current_domain.repository_for(Product).get(product.id).stock == 4

    def test_existing_order_with_a_different_total_is_rejected(self):
        product = _add_product(price=1000, stock=5)
        intent = create_payment_intent(2200)
        order_id = _pending_order(product, payment_intent_id=intent.intent_id)

        with pytest.raises(PaymentRejectedError):
            _confirm(intent.intent_id, product)
        assert current_domain.repository_for(Order).get(order_id).status == "pending"

    def test_unknown_intent_is_rejected(self):
        product = _add_product()
        with pytest.raises(PaymentRejectedError):
            _confirm("pi_unknown", product)

    def test_amount_mismatch_is_rejected(self):
        product = _add_product(price=1000, stock=5)
        intent = create_payment_intent(10)

        with pytest.raises(PaymentRejectedError):
            _confirm(intent.intent_id, product)
        assert current_domain.repository_for(Product).get(product.id).stock == 5
        assert current_domain.repository_for(Order)._dao.query.all().total == 0

    def test_coupon_is_part_of_the_checked_total(self):
        product = _add_product(price=1000)
        intent = create_payment_intent(2000)
        order_id = _confirm(intent.intent_id, product, coupon_code="SAVE10")
        assert current_domain.repository_for(Order).get(order_id).discount == 200

    def test_session_cart_is_cleared(self):
        product = _add_product()
        current_domain.process(
            AddToCart(session_id="sess-pay-001", product_id=product.id, quantity=2),
            asynchronous=False,
        )
        intent = create_payment_intent(2200)

        _confirm(intent.intent_id, product, session_id="sess-pay-001")

        cart = current_domain.repository_for(ShoppingCart).get_for_session("sess-pay-001")
        assert cart.items == []


class TestPaymentWebhook:
    def test_success_moves_order_to_processing(self):
        order_id = _pending_order(_add_product())

        result = current_domain.process(
            ProcessPaymentWebhook(event_id="evt_1", event_type=PAYMENT_SUCCEEDED, order_id=order_id),
            asynchronous=False,
        )
        assert result == order_id
        assert current_domain.repository_for(Order).get(order_id).status == "processing"

    def test_failure_cancels_order(self):
        order_id = _pending_order(_add_product())

        current_domain.process(
            ProcessPaymentWebhook(event_id="evt_1", event_type=PAYMENT_FAILED, order_id=order_id),
            asynchronous=False,
        )
        assert current_domain.repository_for(Order).get(order_id).status == "cancelled"

    def test_falls_back_to_payment_intent(self):
        order_id = _pending_order(_add_product(), payment_intent_id="pi_abc")

        current_domain.process(
            ProcessPaymentWebhook(event_id="evt_1", event_type=PAYMENT_SUCCEEDED, payment_intent_id="pi_abc"),
            asynchronous=False,
        )
        assert current_domain.repository_for(Order).get(order_id).status == "processing"

    def test_unknown_order_id_falls_back_to_payment_intent(self):
        order_id = _pending_order(_add_product(), payment_intent_id="pi_abc")

        result = current_domain.process(
            ProcessPaymentWebhook(
                event_id="evt_1",
                event_type=PAYMENT_SUCCEEDED,
                order_id="no-such-order",
                payment_intent_id="pi_abc",
            ),
            asynchronous=False,
        )
        assert result == order_id
        assert current_domain.repository_for(Order).get(order_id).status == "processing"

    def test_redelivery_is_harmless(self):
        order_id = _pending_order(_add_product())
        command = ProcessPaymentWebhook(event_id="evt_1", event_type=PAYMENT_SUCCEEDED, order_id=order_id)

        current_domain.process(command, asynchronous=False)
        assert current_domain.process(command, asynchronous=False) == order_id
        assert current_domain.repository_for(Order).get(order_id).status == "processing"

    def test_late_failure_does_not_undo_shipping(self):
        order_id = _pending_order(_add_product())
        repo = current_domain.repository_for(Order)
        order = repo.get(order_id)
        order.change_status("processing")
        order.change_status("shipped")
        repo.add(order)

        result = current_domain.process(
            ProcessPaymentWebhook(event_id="evt_2", event_type=PAYMENT_FAILED, order_id=order_id),
            asynchronous=False,
        )
        assert result is None
        assert repo.get(order_id).status == "shipped"

    def test_unknown_event_type_is_ignored(self):
        order_id = _pending_order(_add_product())
        result = current_domain.process(
            ProcessPaymentWebhook(event_id="evt_1", event_type="charge.refunded", order_id=order_id),
            asynchronous=False,
        )
        assert result is None
        assert current_domain.repository_for(Order).get(order_id).status == "pending"

    def test_unknown_order_is_acknowledged(self):
        result = current_domain.process(
            ProcessPaymentWebhook(event_id="evt_1", event_type=PAYMENT_SUCCEEDED, order_id="missing"),
            asynchronous=False,
        )
        assert result is None
