"""Repository for the Product aggregate, with catalogue browsing queries."""

import math
from dataclasses import dataclass, field

from protean.utils.query import Q

from storefront.catalogue.product import Product
from storefront.domain import storefront

DEFAULT_PAGE_SIZE = 12

_SORT_FIELDS = {
    "createdAt": "created_at",
    "created_at": "created_at",
    "price": "price",
    "name": "name",
}


@dataclass
class ProductFilters:
    category: str | None = None
    material: str | None = None
    gemstone: str | None = None
    style: str | None = None
    occasion: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    featured: bool = False
    on_sale: bool = False
    search: str | None = None


@dataclass
class ProductPage:
    products: list = field(default_factory=list)
    current_page: int = 1
    total_pages: int = 0
    total_products: int = 0
    has_next_page: bool = False
    has_prev_page: bool = False


@storefront.repository(part_of=Product)
class ProductRepository:
    def browse(
        self,
        filters: ProductFilters | None = None,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> ProductPage:
        """Page through active products matching ``filters``."""
        filters = filters or ProductFilters()
        page = max(page, 1)
        limit = max(limit, 1)

        query = self._dao.query.filter(is_active=True)

        if filters.category:
            query = query.filter(category__iexact=filters.category)
        for name in ("material", "gemstone", "style", "occasion"):
            value = getattr(filters, name)
            if value:
                query = query.filter(**{name: value})
        if filters.featured:
            query = query.filter(is_featured=True)
        if filters.on_sale:
            query = query.filter(is_on_sale=True)
        if filters.min_price is not None:
            query = query.filter(price__gte=filters.min_price)
        if filters.max_price is not None:
            query = query.filter(price__lte=filters.max_price)
        if filters.search:
            term = filters.search
            query = query.filter(
                Q(name__icontains=term) | Q(description__icontains=term) | Q(tags__icontains=term)
            )

        sort_field = _SORT_FIELDS.get(sort_by, "created_at")
        ordering = f"-{sort_field}" if sort_order == "desc" else sort_field

        skip = (page - 1) * limit
        results = query.order_by(ordering).offset(skip).limit(limit).all()

        total = results.total
        return ProductPage(
            products=results.items,
            current_page=page,
            total_pages=math.ceil(total / limit),
            total_products=total,
            has_next_page=skip + len(results.items) < total,
            has_prev_page=page > 1,
        )

    def find_by_slug(self, slug: str) -> Product | None:
        results = self._dao.query.filter(slug=slug).all().items
        return results[0] if results else None
