"""Application tests for catalogue browsing: filters, search, sorting and paging."""

import pytest
from protean import current_domain

from storefront.catalogue.availability import DeactivateProduct
from storefront.catalogue.product import Product
from storefront.catalogue.repository import ProductFilters
from storefront.catalogue.seed import seed_catalogue


@pytest.fixture()
def catalogue():
    seed_catalogue()
    return current_domain.repository_for(Product)


def _names(page):
    return {product.name for product in page.products}


class TestFilters:
    def test_only_active_products(self, catalogue):
        gold_ring = catalogue.find_by_slug("gold-ring")
        current_domain.process(DeactivateProduct(product_id=gold_ring.id), asynchronous=False)

        page = catalogue.browse(limit=50)
        assert page.total_products == 9
        assert "Gold Ring" not in _names(page)

    def test_category_is_case_insensitive(self, catalogue):
        page = catalogue.browse(ProductFilters(category="RINGS"))
        assert _names(page) == {"Pink Heart Ring", "Purple Stone Ring", "Gold Ring"}

    def test_material(self, catalogue):
        page = catalogue.browse(ProductFilters(material="Gold"))
        assert _names(page) == {"Gold Ring", "Gold Chain Bracelet"}

    def test_gemstone(self, catalogue):
        page = catalogue.browse(ProductFilters(gemstone="Pearl"))
        assert _names(page) == {"Pearl Drop Earrings", "Pearl Loop Earring"}

    def test_price_range(self, catalogue):
        page = catalogue.browse(ProductFilters(min_price=1400, max_price=2800))
        assert _names(page) == {"Pink Heart Ring", "Flower Necklace", "Silver Stud Necklace", "Gold Chain Bracelet"}

    def test_featured(self, catalogue):
        page = catalogue.browse(ProductFilters(featured=True))
        assert _names(page) == {"Pink Heart Ring", "Gold Ring", "Flower Necklace", "Diamond Necklace"}

    def test_on_sale(self, catalogue):
        page = catalogue.browse(ProductFilters(on_sale=True))
        assert page.total_products == 4

    def test_search_matches_name_description_and_tags(self, catalogue):
        page = catalogue.browse(ProductFilters(search="flower"))
        assert _names(page) == {"Flower Earring", "Flower Necklace"}

        page = catalogue.browse(ProductFilters(search="timeless"))
        assert _names(page) == {"Pearl Drop Earrings"}

    def test_no_match(self, catalogue):
        page = catalogue.browse(ProductFilters(search="tiara"))
        assert page.products == []
        assert page.total_products == 0
        assert page.total_pages == 0


class TestSortingAndPaging:
    def test_sort_by_price_ascending(self, catalogue):
        page = catalogue.browse(sort_by="price", sort_order="asc", limit=3)
        assert [product.price for product in page.products] == [950, 1100, 1200]

    def test_sort_by_price_descending(self, catalogue):
        page = catalogue.browse(sort_by="price", sort_order="desc", limit=2)
        assert [product.name for product in page.products] == ["Diamond Necklace", "Gold Ring"]

    def test_first_page(self, catalogue):
        page = catalogue.browse(sort_by="price", sort_order="asc", page=1, limit=4)
        assert len(page.products) == 4
        assert page.current_page == 1
        assert page.total_pages == 3
        assert page.total_products == 10
        assert page.has_next_page is True
        assert page.has_prev_page is False

    def test_last_page(self, catalogue):
        page = catalogue.browse(sort_by="price", sort_order="asc", page=3, limit=4)
        assert [product.name for product in page.products] == ["Gold Ring", "Diamond Necklace"]
        assert page.has_next_page is False
        assert page.has_prev_page is True
