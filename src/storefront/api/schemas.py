"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands. Field names travel as camelCase on the wire.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class SelectedOptionsSchema(ApiModel):
    size: str | None = None
    color: str | None = None
    material: str | None = None

    @classmethod
    def from_domain(cls, options):
        if options is None:
            return None
        return cls(size=options.size, color=options.color, material=options.material)


class CustomerSchema(ApiModel):
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    phone: str | None = Field(None, max_length=50)


class AddressSchema(ApiModel):
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip_code: str = Field(min_length=1)
    country: str = "Pakistan"


class OrderItemSchema(ApiModel):
    product_id: str
    quantity: int = Field(ge=1)
    price: float | None = Field(None, ge=0)
    selected_options: SelectedOptionsSchema | None = None


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(ApiModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "productId": "0b6f3c1e-1d0c-4c57-9a59-8d1a2b1f0c11",
                    "quantity": 2,
                    "selectedOptions": {"size": "7", "color": "gold"},
                }
            ]
        },
    )

    product_id: str
    quantity: int = Field(1, ge=1)
    selected_options: SelectedOptionsSchema | None = None


class UpdateCartItemRequest(ApiModel):
    quantity: int = Field(ge=1)


class ApplyCouponRequest(ApiModel):
    coupon_code: str = Field(min_length=1, max_length=50)


# ---------------------------------------------------------------------------
# Product Request Schemas
# ---------------------------------------------------------------------------
class CreateProductRequest(ApiModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "name": "Gold Ring",
                    "description": "A classic gold ring that never goes out of style.",
                    "price": 3500,
                    "category": "rings",
                    "material": "Gold",
                    "gemstone": "None",
                    "style": "Classic",
                    "occasion": "Everyday",
                    "stock": 8,
                    "tags": ["gold", "classic", "ring"],
                }
            ]
        },
    )

    name: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    price: float = Field(ge=0)
    category: str = Field(min_length=1, max_length=100)
    material: str
    stock: int = Field(0, ge=0)
    sku: str | None = Field(None, max_length=50)
    short_description: str | None = Field(None, max_length=500)
    compare_price: float | None = Field(None, ge=0)
    images: list[str] = Field(default_factory=list)
    brand: str | None = Field(None, max_length=100)
    gemstone: str | None = None
    weight: float | None = Field(None, ge=0)
    weight_unit: str | None = None
    size: str | None = None
    color: str | None = None
    style: str | None = None
    occasion: str | None = None
    tags: list[str] = Field(default_factory=list)
    is_featured: bool = False
    is_on_sale: bool = False


class RestockRequest(ApiModel):
    quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class OrderDataSchema(ApiModel):
    customer: CustomerSchema
    shipping_address: AddressSchema
    items: list[OrderItemSchema] = Field(min_length=1)
    coupon_code: str | None = None
    shipping_method: str | None = None
    notes: str | None = None


class CreateOrderRequest(OrderDataSchema):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "customer": {"name": "Ayesha Khan", "email": "ayesha@example.com", "phone": "+92 300 1234567"},
                    "shippingAddress": {
                        "street": "12 Mall Road",
                        "city": "Lahore",
                        "state": "Punjab",
                        "zipCode": "54000",
                        "country": "Pakistan",
                    },
                    "items": [{"productId": "0b6f3c1e-1d0c-4c57-9a59-8d1a2b1f0c11", "quantity": 1, "price": 3500}],
                    "paymentIntentId": "pi_3Nx...",
                }
            ]
        },
    )

    order_number: str | None = Field(None, max_length=50)
    payment_intent_id: str | None = None
    payment_customer_id: str | None = None
    currency: str = Field("pkr", max_length=3)
    clear_cart: bool = True


class UpdateOrderStatusRequest(ApiModel):
    status: str
    tracking_number: str | None = None
    estimated_delivery: datetime | None = None


# ---------------------------------------------------------------------------
# Payment Request Schemas
# ---------------------------------------------------------------------------
class CreatePaymentIntentRequest(ApiModel):
    amount: float
    currency: str = "pkr"
    customer_email: str | None = None


class ConfirmPaymentRequest(ApiModel):
    payment_intent_id: str = Field(min_length=1)
    order_data: OrderDataSchema
    clear_cart: bool = True


class ConfigureGatewayRequest(ApiModel):
    should_succeed: bool = True
    failure_reason: str = "Card declined"
    auto_confirm: bool = True


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ProductSummary(ApiModel):
    id: str
    name: str
    slug: str
    price: float
    images: list[str]
    stock: int
    is_active: bool


class ProductResponse(ApiModel):
    id: str
    name: str
    slug: str
    sku: str
    description: str
    short_description: str | None = None
    price: float
    compare_price: float | None = None
    images: list[str]
    category: str
    brand: str | None = None
    material: str
    gemstone: str | None = None
    weight: float | None = None
    weight_unit: str | None = None
    size: str | None = None
    color: str | None = None
    style: str | None = None
    occasion: str | None = None
    stock: int
    tags: list[str]
    is_active: bool
    is_featured: bool
    is_on_sale: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, product):
        return cls(
            id=str(product.id),
            name=product.name,
            slug=product.slug,
            sku=product.sku,
            description=product.description,
            short_description=product.short_description,
            price=product.price,
            compare_price=product.compare_price,
            images=product.image_list,
            category=product.category,
            brand=product.brand,
            material=product.material,
            gemstone=product.gemstone,
            weight=product.weight,
            weight_unit=product.weight_unit,
            size=product.size,
            color=product.color,
            style=product.style,
            occasion=product.occasion,
            stock=product.stock,
            tags=product.tag_list,
            is_active=product.is_active,
            is_featured=product.is_featured,
            is_on_sale=product.is_on_sale,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class PaginationResponse(ApiModel):
    current_page: int
    total_pages: int
    total_products: int
    has_next_page: bool
    has_prev_page: bool


class ProductPageResponse(ApiModel):
    products: list[ProductResponse]
    pagination: PaginationResponse

    @classmethod
    def from_page(cls, page):
        return cls(
            products=[ProductResponse.from_domain(product) for product in page.products],
            pagination=PaginationResponse(
                current_page=page.current_page,
                total_pages=page.total_pages,
                total_products=page.total_products,
                has_next_page=page.has_next_page,
                has_prev_page=page.has_prev_page,
            ),
        )


class CartItemResponse(ApiModel):
    id: str
    product_id: str
    product: ProductSummary | None = None
    quantity: int
    price: float
    selected_options: SelectedOptionsSchema | None = None
    added_at: datetime | None = None


class CartResponse(ApiModel):
    id: str
    session_id: str
    items: list[CartItemResponse]
    subtotal: float
    tax: float
    shipping: float
    discount: float
    total: float
    coupon_code: str | None = None
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, cart, products=None):
        """Build the response; ``products`` maps product ids to Product aggregates for the line summaries."""
        products = products or {}
        items = sorted(cart.items, key=lambda item: item.added_at.timestamp() if item.added_at else 0)
        return cls(
            id=str(cart.id),
            session_id=cart.session_id,
            items=[
                CartItemResponse(
                    id=str(item.id),
                    product_id=str(item.product_id),
                    product=_product_summary(products.get(str(item.product_id))),
                    quantity=item.quantity,
                    price=item.price,
                    selected_options=SelectedOptionsSchema.from_domain(item.selected_options),
                    added_at=item.added_at,
                )
                for item in items
            ],
            subtotal=cart.subtotal,
            tax=cart.tax,
            shipping=cart.shipping,
            discount=cart.discount,
            total=cart.total,
            coupon_code=cart.coupon_code,
            is_active=cart.is_active,
            created_at=cart.created_at,
            updated_at=cart.updated_at,
        )


def _product_summary(product):
    if product is None:
        return None
    return ProductSummary(
        id=str(product.id),
        name=product.name,
        slug=product.slug,
        price=product.price,
        images=product.image_list,
        stock=product.stock,
        is_active=product.is_active,
    )


class OrderItemResponse(ApiModel):
    id: str
    product_id: str
    quantity: int
    price: float
    selected_options: SelectedOptionsSchema | None = None


class OrderResponse(ApiModel):
    id: str
    order_number: str
    customer: CustomerSchema
    shipping_address: AddressSchema
    items: list[OrderItemResponse]
    subtotal: float
    tax: float
    shipping: float
    discount: float
    total: float
    currency: str
    coupon_code: str | None = None
    payment_intent_id: str | None = None
    payment_customer_id: str | None = None
    status: str
    shipping_method: str
    tracking_number: str | None = None
    estimated_delivery: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, order):
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            customer=CustomerSchema(
                name=order.customer.name,
                email=order.customer.email,
                phone=order.customer.phone,
            ),
            shipping_address=AddressSchema(
                street=order.shipping_address.street,
                city=order.shipping_address.city,
                state=order.shipping_address.state,
                zip_code=order.shipping_address.zip_code,
                country=order.shipping_address.country,
            ),
            items=[
                OrderItemResponse(
                    id=str(item.id),
                    product_id=str(item.product_id),
                    quantity=item.quantity,
                    price=item.price,
                    selected_options=SelectedOptionsSchema.from_domain(item.selected_options),
                )
                for item in order.items
            ],
            subtotal=order.subtotal,
            tax=order.tax,
            shipping=order.shipping,
            discount=order.discount,
            total=order.total,
            currency=order.currency,
            coupon_code=order.coupon_code,
            payment_intent_id=order.payment_intent_id,
            payment_customer_id=order.payment_customer_id,
            status=order.status,
            shipping_method=order.shipping_method,
            tracking_number=order.tracking_number,
            estimated_delivery=order.estimated_delivery,
            shipped_at=order.shipped_at,
            delivered_at=order.delivered_at,
            notes=order.notes,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class PaymentIntentResponse(ApiModel):
    client_secret: str
    payment_intent_id: str


class WebhookAckResponse(ApiModel):
    received: bool = True


class GatewayConfigResponse(ApiModel):
    gateway: str
    should_succeed: bool
    failure_reason: str
    auto_confirm: bool


class HealthResponse(ApiModel):
    status: str = "ok"
    domain: str
