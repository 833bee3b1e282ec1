"""Repository for the ShoppingCart aggregate, keyed by session token."""

from protean.exceptions import ObjectNotFoundError

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront


@storefront.repository(part_of=ShoppingCart)
class ShoppingCartRepository:
    def for_session(self, session_id: str) -> ShoppingCart | None:
        """Return the cart belonging to ``session_id``, or None if the session has none yet."""
        results = self._dao.query.filter(session_id=session_id).all().items
        if not results:
            return None
        return self.get(results[0].id)

    def get_for_session(self, session_id: str) -> ShoppingCart:
        cart = self.for_session(session_id)
        if cart is None:
            raise ObjectNotFoundError({"cart": ["Cart not found"]})
        return cart
