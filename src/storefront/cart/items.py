"""Cart item management: commands and handler."""

import json

from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.cart.management import resolve_cart
from storefront.catalogue.product import Product
from storefront.domain import storefront


@storefront.command(part_of="ShoppingCart")
class AddToCart:
    session_id = String(required=True, max_length=255)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    selected_options = Text()  # JSON object: size, color, material


@storefront.command(part_of="ShoppingCart")
class UpdateCartQuantity:
    session_id = String(required=True, max_length=255)
    item_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="ShoppingCart")
class RemoveFromCart:
    session_id = String(required=True, max_length=255)
    item_id = Identifier(required=True)


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = current_domain.repository_for(Product).get(command.product_id)

        cart = resolve_cart(command.session_id)
        cart.add_item(
            product=product,
            quantity=command.quantity,
            selected_options=json.loads(command.selected_options) if command.selected_options else None,
        )
        current_domain.repository_for(ShoppingCart).add(cart)
        return str(cart.id)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get_for_session(command.session_id)

        product = None
        item = cart.find_item(command.item_id)
        if item is not None:
            product = current_domain.repository_for(Product).get(item.product_id)

        cart.update_item_quantity(
            item_id=command.item_id,
            quantity=command.quantity,
            product=product,
        )
        repo.add(cart)
        return str(cart.id)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get_for_session(command.session_id)
        cart.remove_item(item_id=command.item_id)
        repo.add(cart)
        return str(cart.id)
