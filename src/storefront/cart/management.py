"""Cart lifecycle: get-or-create and clear."""

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront


@storefront.command(part_of="ShoppingCart")
class ResolveCart:
    session_id = String(required=True, max_length=255)


@storefront.command(part_of="ShoppingCart")
class ClearCart:
    session_id = String(required=True, max_length=255)


def resolve_cart(session_id):
    """Load the session's cart, creating an empty one if there is none yet."""
    repo = current_domain.repository_for(ShoppingCart)
    cart = repo.for_session(session_id)
    if cart is None:
        cart = ShoppingCart.create(session_id=session_id)
        repo.add(cart)
    return cart


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(ResolveCart)
    def resolve_cart(self, command):
        return str(resolve_cart(command.session_id).id)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get_for_session(command.session_id)
        cart.clear()
        repo.add(cart)
        return str(cart.id)
