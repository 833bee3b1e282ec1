"""Product creation: command and handler."""

from protean import handle
from protean.fields import Boolean, Float, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_OPTIONAL_DETAILS = (
    "short_description",
    "compare_price",
    "images",
    "brand",
    "gemstone",
    "weight",
    "weight_unit",
    "size",
    "color",
    "style",
    "occasion",
    "tags",
    "is_featured",
    "is_on_sale",
)


@storefront.command(part_of="Product")
class CreateProduct:
    name = String(required=True, max_length=255)
    description = Text(required=True)
    price = Float(required=True, min_value=0.0)
    category = String(required=True, max_length=100)
    material = String(required=True, max_length=50)
    stock = Integer(min_value=0, default=0)
    sku = String(max_length=50)
    slug = String(max_length=255)
    short_description = String(max_length=500)
    compare_price = Float(min_value=0.0)
    images = Text()  # JSON array
    brand = String(max_length=100)
    gemstone = String(max_length=50)
    weight = Float(min_value=0.0)
    weight_unit = String(max_length=10)
    size = String(max_length=50)
    color = String(max_length=50)
    style = String(max_length=50)
    occasion = String(max_length=50)
    tags = Text()  # JSON array
    is_featured = Boolean(default=False)
    is_on_sale = Boolean(default=False)


@storefront.command_handler(part_of=Product)
class CreateProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        details = {
            name: getattr(command, name) for name in _OPTIONAL_DETAILS if getattr(command, name) is not None
        }
        product = Product.create(
            name=command.name,
            description=command.description,
            price=command.price,
            category=command.category,
            material=command.material,
            stock=command.stock,
            sku=command.sku,
            slug=command.slug,
            **details,
        )
        current_domain.repository_for(Product).add(product)
        logger.info("product_added", product_id=str(product.id), sku=product.sku)
        return str(product.id)
