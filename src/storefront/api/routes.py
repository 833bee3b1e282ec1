"""FastAPI routes for the Storefront: cart, products, orders and payments."""

import json
import os

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AddToCartRequest,
    ApplyCouponRequest,
    CartResponse,
    ConfigureGatewayRequest,
    ConfirmPaymentRequest,
    CreateOrderRequest,
    CreatePaymentIntentRequest,
    CreateProductRequest,
    GatewayConfigResponse,
    OrderDataSchema,
    OrderResponse,
    PaymentIntentResponse,
    ProductPageResponse,
    ProductResponse,
    RestockRequest,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
    WebhookAckResponse,
)
from storefront.api.session import get_session
from storefront.cart.cart import ShoppingCart
from storefront.cart.coupons import ApplyCouponToCart, RemoveCouponFromCart
from storefront.cart.items import AddToCart, RemoveFromCart, UpdateCartQuantity
from storefront.cart.management import ClearCart, ResolveCart
from storefront.catalogue.availability import ActivateProduct, DeactivateProduct, RestockProduct
from storefront.catalogue.creation import CreateProduct
from storefront.catalogue.product import Product
from storefront.catalogue.repository import DEFAULT_PAGE_SIZE, ProductFilters
from storefront.gateway import get_gateway
from storefront.gateway.fake_adapter import FakeGateway
from storefront.order.creation import PlaceOrder
from storefront.order.order import Order
from storefront.order.status import UpdateOrderStatus
from storefront.payment.confirmation import ConfirmPayment
from storefront.payment.intents import create_payment_intent
from storefront.payment.webhook import ProcessPaymentWebhook
from storefront.shared.session import SessionIdentity


def _cart_response(cart_id: str) -> CartResponse:
    cart = current_domain.repository_for(ShoppingCart).get(cart_id)
    product_repo = current_domain.repository_for(Product)
    products = {}
    for item in cart.items:
        try:
            products[str(item.product_id)] = product_repo.get(item.product_id)
        except ObjectNotFoundError:
            continue
    return CartResponse.from_domain(cart, products)


def _order_payload(body: OrderDataSchema) -> dict:
    return {
        "customer": json.dumps(body.customer.model_dump()),
        "shipping_address": json.dumps(body.shipping_address.model_dump()),
        "items": json.dumps([item.model_dump() for item in body.items]),
        "coupon_code": body.coupon_code,
        "shipping_method": body.shipping_method,
        "notes": body.notes,
    }


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(session: SessionIdentity = Depends(get_session)) -> CartResponse:
    """Return the session's cart, creating an empty one on first visit."""
    cart_id = current_domain.process(ResolveCart(session_id=session.token), asynchronous=False)
    return _cart_response(cart_id)


@cart_router.post("/add", response_model=CartResponse)
async def add_to_cart(body: AddToCartRequest, session: SessionIdentity = Depends(get_session)) -> CartResponse:
    command = AddToCart(
        session_id=session.token,
        product_id=body.product_id,
        quantity=body.quantity,
        selected_options=json.dumps(body.selected_options.model_dump()) if body.selected_options else None,
    )
    cart_id = current_domain.process(command, asynchronous=False)
    return _cart_response(cart_id)


@cart_router.put("/update/{item_id}", response_model=CartResponse)
async def update_cart_item(
    item_id: str,
    body: UpdateCartItemRequest,
    session: SessionIdentity = Depends(get_session),
) -> CartResponse:
    command = UpdateCartQuantity(session_id=session.token, item_id=item_id, quantity=body.quantity)
    cart_id = current_domain.process(command, asynchronous=False)
    return _cart_response(cart_id)


@cart_router.delete("/remove/{item_id}", response_model=CartResponse)
async def remove_cart_item(item_id: str, session: SessionIdentity = Depends(get_session)) -> CartResponse:
    command = RemoveFromCart(session_id=session.token, item_id=item_id)
    cart_id = current_domain.process(command, asynchronous=False)
    return _cart_response(cart_id)


@cart_router.delete("/clear", response_model=CartResponse)
async def clear_cart(session: SessionIdentity = Depends(get_session)) -> CartResponse:
    cart_id = current_domain.process(ClearCart(session_id=session.token), asynchronous=False)
    return _cart_response(cart_id)


@cart_router.post("/apply-coupon", response_model=CartResponse)
async def apply_coupon(body: ApplyCouponRequest, session: SessionIdentity = Depends(get_session)) -> CartResponse:
    command = ApplyCouponToCart(session_id=session.token, coupon_code=body.coupon_code)
    cart_id = current_domain.process(command, asynchronous=False)
    return _cart_response(cart_id)


@cart_router.delete("/remove-coupon", response_model=CartResponse)
async def remove_coupon(session: SessionIdentity = Depends(get_session)) -> CartResponse:
    cart_id = current_domain.process(RemoveCouponFromCart(session_id=session.token), asynchronous=False)
    return _cart_response(cart_id)


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("", response_model=ProductPageResponse)
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
    category: str | None = None,
    material: str | None = None,
    gemstone: str | None = None,
    style: str | None = None,
    occasion: str | None = None,
    min_price: float | None = Query(None, alias="minPrice", ge=0),
    max_price: float | None = Query(None, alias="maxPrice", ge=0),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    search: str | None = None,
    featured: bool = False,
    on_sale: bool = Query(False, alias="onSale"),
) -> ProductPageResponse:
    """Page through active products with filters, free-text search and sorting."""
    filters = ProductFilters(
        category=category,
        material=material,
        gemstone=gemstone,
        style=style,
        occasion=occasion,
        min_price=min_price,
        max_price=max_price,
        featured=featured,
        on_sale=on_sale,
        search=search,
    )
    result = current_domain.repository_for(Product).browse(
        filters=filters,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return ProductPageResponse.from_page(result)


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    product = current_domain.repository_for(Product).get(product_id)
    return ProductResponse.from_domain(product)


@product_router.post("", status_code=201, response_model=ProductResponse)
async def create_product(body: CreateProductRequest) -> ProductResponse:
    command = CreateProduct(
        **body.model_dump(exclude={"images", "tags"}, exclude_none=True),
        images=json.dumps(body.images),
        tags=json.dumps(body.tags),
    )
    product_id = current_domain.process(command, asynchronous=False)
    return ProductResponse.from_domain(current_domain.repository_for(Product).get(product_id))


@product_router.put("/{product_id}/activate", response_model=ProductResponse)
async def activate_product(product_id: str) -> ProductResponse:
    current_domain.process(ActivateProduct(product_id=product_id), asynchronous=False)
    return ProductResponse.from_domain(current_domain.repository_for(Product).get(product_id))


@product_router.put("/{product_id}/deactivate", response_model=ProductResponse)
async def deactivate_product(product_id: str) -> ProductResponse:
    current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
    return ProductResponse.from_domain(current_domain.repository_for(Product).get(product_id))


@product_router.put("/{product_id}/restock", response_model=ProductResponse)
async def restock_product(product_id: str, body: RestockRequest) -> ProductResponse:
    current_domain.process(RestockProduct(product_id=product_id, quantity=body.quantity), asynchronous=False)
    return ProductResponse.from_domain(current_domain.repository_for(Product).get(product_id))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def create_order(body: CreateOrderRequest, session: SessionIdentity = Depends(get_session)) -> OrderResponse:
    """Place an order. It stays pending until the payment webhook confirms it."""
    command = PlaceOrder(
        **_order_payload(body),
        order_number=body.order_number,
        payment_intent_id=body.payment_intent_id,
        payment_customer_id=body.payment_customer_id,
        currency=body.currency,
        session_id=session.token if body.clear_cart else None,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return OrderResponse.from_domain(current_domain.repository_for(Order).get(order_id))


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    return OrderResponse.from_domain(current_domain.repository_for(Order).get(order_id))


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> OrderResponse:
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        tracking_number=body.tracking_number,
        estimated_delivery=body.estimated_delivery,
    )
    current_domain.process(command, asynchronous=False)
    return OrderResponse.from_domain(current_domain.repository_for(Order).get(order_id))


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/create-payment-intent", response_model=PaymentIntentResponse)
async def create_intent(body: CreatePaymentIntentRequest) -> PaymentIntentResponse:
    """Open a payment intent with the processor for the given amount."""
    intent = create_payment_intent(
        amount=body.amount,
        currency=body.currency,
        customer_email=body.customer_email,
    )
    return PaymentIntentResponse(client_secret=intent.client_secret, payment_intent_id=intent.intent_id)


@payment_router.post("/confirm-payment", response_model=OrderResponse)
async def confirm_payment(body: ConfirmPaymentRequest, session: SessionIdentity = Depends(get_session)) -> OrderResponse:
    """Verify a succeeded payment intent with the processor and place the paid order."""
    command = ConfirmPayment(
        payment_intent_id=body.payment_intent_id,
        session_id=session.token if body.clear_cart else None,
        **_order_payload(body.order_data),
    )
    order_id = current_domain.process(command, asynchronous=False)
    return OrderResponse.from_domain(current_domain.repository_for(Order).get(order_id))


@payment_router.post("/webhook", response_model=WebhookAckResponse)
async def payment_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None),
) -> WebhookAckResponse:
    """Receive a signed notification from the payment processor."""
    payload = await request.body()
    event = get_gateway().construct_webhook_event(payload, stripe_signature)

    command = ProcessPaymentWebhook(
        event_id=event.event_id,
        event_type=event.event_type,
        payment_intent_id=event.payment_intent_id,
        order_id=event.metadata.get("orderId") or event.metadata.get("order_id"),
    )
    current_domain.process(command, asynchronous=False)
    return WebhookAckResponse()


@payment_router.post("/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only).

    This endpoint is only available when PROTEAN_ENV is not 'production'.
    It allows toggling success/failure behavior for manual API testing.
    """
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(
        should_succeed=body.should_succeed,
        failure_reason=body.failure_reason,
        auto_confirm=body.auto_confirm,
    )
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        failure_reason=gateway.failure_reason,
        auto_confirm=gateway.auto_confirm,
    )
