"""Cart coupon management: commands and handler."""

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront


@storefront.command(part_of="ShoppingCart")
class ApplyCouponToCart:
    session_id = String(required=True, max_length=255)
    coupon_code = String(required=True, max_length=50)


@storefront.command(part_of="ShoppingCart")
class RemoveCouponFromCart:
    session_id = String(required=True, max_length=255)


@storefront.command_handler(part_of=ShoppingCart)
class ManageCouponsHandler:
    @handle(ApplyCouponToCart)
    def apply_coupon(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get_for_session(command.session_id)
        cart.apply_coupon(command.coupon_code)
        repo.add(cart)
        return str(cart.id)

    @handle(RemoveCouponFromCart)
    def remove_coupon(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get_for_session(command.session_id)
        cart.remove_coupon()
        repo.add(cart)
        return str(cart.id)
