"""Shopping Cart aggregate (CQRS): one cart per anonymous session token.

The cart holds the lines a shopper has picked and keeps its totals priced at
all times. Every operation that touches lines or the coupon reprices the cart
before returning, so stored totals are never stale. Carts are never deleted,
only cleared.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from storefront.cart.events import (
    CartCleared,
    CartCouponApplied,
    CartCouponRemoved,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
)
from storefront.domain import storefront
from storefront.pricing import calculate_totals, resolve_coupon, to_minor_units, zero_totals
from storefront.shared.options import SelectedOptions


@storefront.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)  # Captured when the product was added
    selected_options = ValueObject(SelectedOptions)
    added_at = DateTime()


@storefront.aggregate
class ShoppingCart:
    session_id = String(required=True, max_length=255, unique=True)
    customer_id = Identifier()  # Upgrade path to authenticated ownership
    items = HasMany(CartItem)
    subtotal = Float(default=0.0)
    tax = Float(default=0.0)
    shipping = Float(default=0.0)
    discount = Float(default=0.0)
    total = Float(default=0.0)
    coupon_code = String(max_length=50)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def totals_must_balance(self):
        expected = (
            to_minor_units(self.subtotal or 0)
            + to_minor_units(self.tax or 0)
            + to_minor_units(self.shipping or 0)
            - to_minor_units(self.discount or 0)
        )
        if to_minor_units(self.total or 0) != expected:
            raise ValidationError({"total": ["Total must equal subtotal + tax + shipping - discount"]})

    @invariant.post
    def subtotal_must_match_items(self):
        expected = sum(to_minor_units(item.price) * item.quantity for item in self.items)
        if to_minor_units(self.subtotal or 0) != expected:
            raise ValidationError({"subtotal": ["Subtotal must equal the sum of line prices"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, session_id, customer_id=None):
        now = datetime.now(UTC)
        return cls(
            session_id=session_id,
            customer_id=customer_id,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def find_item(self, item_id):
        return next((i for i in self.items if str(i.id) == str(item_id)), None)

    def add_item(self, product, quantity, selected_options=None):
        """Add ``quantity`` of ``product`` to the cart.

        A product already in the cart gets its quantity topped up and its
        options replaced by the new ones. Otherwise a new line captures the
        current product price.
        """
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        product.ensure_available()
        product.ensure_in_stock(quantity)

        options = SelectedOptions.from_dict(selected_options)
        existing = next((i for i in self.items if str(i.product_id) == str(product.id)), None)
        now = datetime.now(UTC)

        with atomic_change(self):
            if existing:
                existing.quantity += quantity
                existing.selected_options = options
                item_id = str(existing.id)
            else:
                item = CartItem(
                    product_id=str(product.id),
                    quantity=quantity,
                    price=product.price,
                    selected_options=options,
                    added_at=now,
                )
                self.add_items(item)
                item_id = str(item.id)

            self._reprice()
            self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=item_id,
                product_id=str(product.id),
                quantity=quantity,
            )
        )

    def update_item_quantity(self, item_id, quantity, product=None):
        """Set a line's quantity, checked against the product's current stock when known."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        item = self.find_item(item_id)
        if item is None:
            raise ObjectNotFoundError({"item_id": ["Item not found in cart"]})
        if product is not None:
            product.ensure_in_stock(quantity)

        previous_quantity = item.quantity
        with atomic_change(self):
            item.quantity = quantity
            self._reprice()
            self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, item_id):
        """Remove a line from the cart. Unknown lines are ignored, but the cart is still repriced."""
        item = self.find_item(item_id)

        with atomic_change(self):
            if item is not None:
                self.remove_items(item)
            self._reprice()
            self.updated_at = datetime.now(UTC)

        if item is not None:
            self.raise_(CartItemRemoved(cart_id=str(self.id), item_id=str(item_id)))

    def clear(self):
        """Empty the cart: no lines, no coupon, every total zero."""
        with atomic_change(self):
            for item in list(self.items):
                self.remove_items(item)
            self.coupon_code = None
            self._apply_totals(zero_totals())
            self.updated_at = datetime.now(UTC)

        self.raise_(CartCleared(cart_id=str(self.id)))

    # -------------------------------------------------------------------
    # Coupon management
    # -------------------------------------------------------------------
    def apply_coupon(self, code):
        """Apply a coupon, replacing the one already on the cart. Unknown codes change nothing."""
        coupon = resolve_coupon(code)

        with atomic_change(self):
            self.coupon_code = coupon.code
            self._reprice()
            self.updated_at = datetime.now(UTC)

        self.raise_(CartCouponApplied(cart_id=str(self.id), coupon_code=coupon.code))

    def remove_coupon(self):
        previous = self.coupon_code

        with atomic_change(self):
            self.coupon_code = None
            self._reprice()
            self.updated_at = datetime.now(UTC)

        self.raise_(CartCouponRemoved(cart_id=str(self.id), coupon_code=previous))

    # -------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------
    def _reprice(self):
        totals = calculate_totals(
            [(item.price, item.quantity) for item in self.items],
            coupon_code=self.coupon_code,
        )
        self._apply_totals(totals)

    def _apply_totals(self, totals):
        self.subtotal = totals.subtotal
        self.tax = totals.tax
        self.shipping = totals.shipping
        self.discount = totals.discount
        self.total = totals.total
