"""Repository for the Order aggregate."""

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.repository(part_of=Order)
class OrderRepository:
    def find_by_number(self, order_number: str) -> Order | None:
        results = self._dao.query.filter(order_number=order_number).all().items
        return results[0] if results else None

    def find_by_payment_intent(self, payment_intent_id: str) -> Order | None:
        results = self._dao.query.filter(payment_intent_id=payment_intent_id).all().items
        return results[0] if results else None
