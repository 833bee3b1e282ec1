"""Selected product options shared by cart and order line items."""

from protean.fields import String

from storefront.domain import storefront


@storefront.value_object
class SelectedOptions:
    """Size, color and material picked by the shopper for one line item."""

    size = String(max_length=50)
    color = String(max_length=50)
    material = String(max_length=50)

    @classmethod
    def from_dict(cls, data):
        """Build options from a plain mapping, or return None when nothing was picked."""
        if not data:
            return None
        values = {key: data.get(key) for key in ("size", "color", "material") if data.get(key)}
        return cls(**values) if values else None
