"""Tests for anonymous session identity and selected line options."""

from storefront.shared.options import SelectedOptions
from storefront.shared.session import SessionIdentity


class TestSessionIdentity:
    def test_minted_tokens_are_unique(self):
        assert SessionIdentity.mint().token != SessionIdentity.mint().token

    def test_anonymous_by_default(self):
        identity = SessionIdentity(token="sess-001")
        assert identity.is_authenticated is False

    def test_customer_makes_it_authenticated(self):
        identity = SessionIdentity(token="sess-001", customer_id="cust-001")
        assert identity.is_authenticated is True


class TestSelectedOptions:
    def test_from_dict(self):
        options = SelectedOptions.from_dict({"size": "7", "color": "gold"})
        assert options.size == "7"
        assert options.color == "gold"
        assert options.material is None

    def test_nothing_picked(self):
        assert SelectedOptions.from_dict(None) is None
        assert SelectedOptions.from_dict({}) is None
        assert SelectedOptions.from_dict({"size": "", "color": None}) is None

    def test_unknown_keys_are_ignored(self):
        options = SelectedOptions.from_dict({"engraving": "A+B", "material": "Gold"})
        assert options.material == "Gold"

    def test_equality_by_value(self):
        assert SelectedOptions(size="7") == SelectedOptions(size="7")
