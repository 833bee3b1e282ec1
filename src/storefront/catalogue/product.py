"""Product aggregate: a piece of jewelry in the catalogue, with its price and stock.

Stock only ever goes down through order placement (``decrement_stock``) and
only goes up through an explicit restock.
"""

import json
import re
import time
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String, Text

from storefront.catalogue.events import (
    ProductActivated,
    ProductAdded,
    ProductDeactivated,
    ProductRestocked,
    StockDecremented,
)
from storefront.domain import storefront
from storefront.exceptions import InsufficientStockError, ProductUnavailableError


class Material(Enum):
    GOLD = "Gold"
    SILVER = "Silver"
    PLATINUM = "Platinum"
    ROSE_GOLD = "Rose Gold"
    WHITE_GOLD = "White Gold"
    STERLING_SILVER = "Sterling Silver"
    OTHER = "Other"


class Gemstone(Enum):
    DIAMOND = "Diamond"
    RUBY = "Ruby"
    SAPPHIRE = "Sapphire"
    EMERALD = "Emerald"
    PEARL = "Pearl"
    OPAL = "Opal"
    AMETHYST = "Amethyst"
    NONE = "None"
    OTHER = "Other"


class Style(Enum):
    CLASSIC = "Classic"
    MODERN = "Modern"
    VINTAGE = "Vintage"
    CONTEMPORARY = "Contemporary"
    MINIMALIST = "Minimalist"
    BOLD = "Bold"
    ELEGANT = "Elegant"
    CASUAL = "Casual"


class Occasion(Enum):
    WEDDING = "Wedding"
    ENGAGEMENT = "Engagement"
    ANNIVERSARY = "Anniversary"
    BIRTHDAY = "Birthday"
    HOLIDAY = "Holiday"
    EVERYDAY = "Everyday"
    SPECIAL_OCCASION = "Special Occasion"


class WeightUnit(Enum):
    GRAMS = "grams"
    CARATS = "carats"
    OUNCES = "ounces"


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def generate_sku(name: str) -> str:
    """First three letters of the name plus the last six digits of the millisecond clock."""
    return f"{name[:3].upper()}{str(int(time.time() * 1000))[-6:]}"


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    slug = String(required=True, max_length=255, unique=True)
    sku = String(required=True, max_length=50, unique=True)
    description = Text(required=True)
    short_description = String(max_length=500)
    price = Float(required=True, min_value=0.0)
    compare_price = Float(min_value=0.0)
    images = Text()  # JSON array of image URLs
    category = String(required=True, max_length=100)
    brand = String(max_length=100)
    material = String(required=True, choices=Material)
    gemstone = String(choices=Gemstone)
    weight = Float(min_value=0.0)
    weight_unit = String(choices=WeightUnit, default=WeightUnit.GRAMS.value)
    size = String(max_length=50)
    color = String(max_length=50)
    style = String(choices=Style)
    occasion = String(choices=Occasion)
    stock = Integer(required=True, min_value=0, default=0)
    tags = Text()  # JSON array of search tags
    is_active = Boolean(default=True)
    is_featured = Boolean(default=False)
    is_on_sale = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, name, description, price, category, material, stock=0, sku=None, slug=None, **details):
        """Add a product to the catalogue.

        ``slug`` is derived from the name and ``sku`` is generated when not
        supplied. ``images`` and ``tags`` may be given as lists. Any other
        keyword is passed straight to the matching field.
        """
        now = datetime.now(UTC)
        for key in ("images", "tags"):
            if isinstance(details.get(key), list):
                details[key] = json.dumps(details[key])

        product = cls(
            name=name,
            slug=slug or slugify(name),
            sku=sku or generate_sku(name),
            description=description,
            price=price,
            category=slugify(category),
            material=material,
            stock=stock,
            created_at=now,
            updated_at=now,
            **details,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                name=product.name,
                sku=product.sku,
                price=product.price,
                stock=product.stock,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Availability
    # -------------------------------------------------------------------
    def ensure_available(self):
        if not self.is_active:
            raise ProductUnavailableError({"product_id": ["Product not available"]})

    def ensure_in_stock(self, quantity):
        if quantity > self.stock:
            raise InsufficientStockError(
                {"quantity": [f"Insufficient stock for {self.name}. Only {self.stock} available"]}
            )

    def decrement_stock(self, quantity):
        """Take ``quantity`` units out of stock, refusing to go below zero."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        self.ensure_in_stock(quantity)

        self.stock -= quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockDecremented(
                product_id=str(self.id),
                quantity=quantity,
                remaining_stock=self.stock,
            )
        )

    def restock(self, quantity):
        if quantity < 1:
            raise ValidationError({"quantity": ["Restock quantity must be at least 1"]})

        self.stock += quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(ProductRestocked(product_id=str(self.id), quantity=quantity, new_stock=self.stock))

    def activate(self):
        if self.is_active:
            raise ValidationError({"is_active": ["Product is already active"]})
        self.is_active = True
        self.updated_at = datetime.now(UTC)
        self.raise_(ProductActivated(product_id=str(self.id)))

    def deactivate(self):
        if not self.is_active:
            raise ValidationError({"is_active": ["Product is already inactive"]})
        self.is_active = False
        self.updated_at = datetime.now(UTC)
        self.raise_(ProductDeactivated(product_id=str(self.id)))

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @property
    def image_list(self):
        return json.loads(self.images) if self.images else []

    @property
    def tag_list(self):
        return json.loads(self.tags) if self.tags else []
