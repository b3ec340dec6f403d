"""FastAPI routes for the storefront ordering context.

Orders, the staff admin surface, customer tracking, analytics, delivery
locations, and the session-scoped cart and checkout. Order creation and
tracking lookups are throttled per client.
"""

import json

from fastapi import APIRouter, Depends, HTTPException, Query
from protean.utils.globals import current_domain

from ordering.admin.panel import AdminOrderPanel
from ordering.analytics.dashboard import DEFAULT_LOOKBACK_DAYS, load_dashboard
from ordering.api.rate_limit import order_creation_limit, tracking_limit
from ordering.api.schemas import (
    AddCartLineRequest,
    AdminOrderListResponse,
    AdminOrderSchema,
    BulkDeleteResponse,
    CartLineSchema,
    CartResponse,
    CheckoutRequest,
    CheckoutResponse,
    CreateOrderRequest,
    CustomerFormSchema,
    DashboardResponse,
    DeliveryLocationSchema,
    MessageResponse,
    MpesaConfirmRequest,
    OrderCreatedResponse,
    PaymentInstructionsResponse,
    PendingCountResponse,
    SetQuantityRequest,
    TrackedOrderSchema,
    UpdateStatusRequest,
)
from ordering.cart.cart import CartStore
from ordering.catalogue import get_catalogue
from ordering.checkout.channels import MpesaCheckout, WebsiteCheckout, WhatsAppCheckout
from ordering.checkout.orchestrator import CheckoutResult
from ordering.checkout.payload import CustomerForm
from ordering.checkout.sessions import cart_for, end_session, orchestrator_for
from ordering.order.creation import PlaceOrder
from ordering.order.status import UpdateOrderStatus
from ordering.tracking.query import TrackingState, track_orders


def _customer_form(schema: CustomerFormSchema) -> CustomerForm:
    return CustomerForm(
        name=schema.name,
        phone=schema.phone,
        address=schema.address,
        email=schema.email,
        notes=schema.notes,
        delivery_location_id=schema.delivery_location_id,
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post(
    "",
    status_code=201,
    response_model=OrderCreatedResponse,
    dependencies=[Depends(order_creation_limit)],
)
async def create_order(body: CreateOrderRequest) -> OrderCreatedResponse:
    command = PlaceOrder(
        customer_name=body.customer_name,
        customer_email=body.customer_email,
        customer_phone=body.customer_phone,
        delivery_location_id=body.delivery_location_id,
        delivery_address=body.delivery_address,
        notes=body.notes,
        items=json.dumps([item.model_dump() for item in body.items]),
        subtotal=body.subtotal,
        delivery_fee=body.delivery_fee,
        total=body.total,
        ordered_via=body.ordered_via,
        payment_method=body.payment_method,
        mpesa_code=body.mpesa_code,
        mpesa_phone=body.mpesa_phone,
        mpesa_message=body.mpesa_message,
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderCreatedResponse(order_number=result["order_number"], order_id=result["order_id"])


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin", tags=["admin"])


@admin_router.get("/orders", response_model=AdminOrderListResponse)
async def list_orders(
    status: str = "all",
    search: str = "",
    page: int = 1,
    per_page: int = Query(default=15, ge=1, le=100),
) -> AdminOrderListResponse:
    panel = AdminOrderPanel(per_page=per_page)
    result = panel.list_orders(search=search, status=status, page=page)
    return AdminOrderListResponse(
        orders=[AdminOrderSchema.model_validate(view, from_attributes=True) for view in result.items],
        page=result.page,
        per_page=result.per_page,
        total_items=result.total_items,
        total_pages=result.total_pages,
        stats=panel.stats(),
    )


@admin_router.get("/orders/pending-count", response_model=PendingCountResponse)
async def pending_count() -> PendingCountResponse:
    return PendingCountResponse(count=AdminOrderPanel().pending_count())


@admin_router.patch("/orders", response_model=MessageResponse)
@admin_router.put("/orders", response_model=MessageResponse)
async def update_order_status(body: UpdateStatusRequest) -> MessageResponse:
    current_domain.process(UpdateOrderStatus(order_id=body.id, status=body.status), asynchronous=False)
    return MessageResponse(message="Order updated")


@admin_router.delete("/orders", response_model=BulkDeleteResponse)
async def delete_orders(ids: str = Query(..., description="Comma-separated order ids")) -> BulkDeleteResponse:
    order_ids = [order_id.strip() for order_id in ids.split(",") if order_id.strip()]
    if not order_ids:
        raise HTTPException(status_code=400, detail="No order ids given")

    # The HTTP call itself is the staff confirmation.
    report = AdminOrderPanel().delete_orders(order_ids, confirm=lambda prompt: True)
    return BulkDeleteResponse(requested=report.requested, deleted=report.deleted, message=report.message)


@admin_router.get("/analytics", response_model=DashboardResponse)
async def analytics(
    days: int = Query(default=DEFAULT_LOOKBACK_DAYS, ge=1, le=365),
    product_page: int = 1,
    activity_page: int = 1,
) -> DashboardResponse:
    dashboard = load_dashboard(days=days, product_page=product_page, activity_page=activity_page)
    return DashboardResponse.model_validate(
        {
            "summary": dashboard.summary,
            "revenue_by_month": dashboard.revenue_by_month,
            "top_products": dashboard.top_products,
            "categories": dashboard.categories,
            "activity": dashboard.activity,
            "traffic": dashboard.traffic,
            "view_change": dashboard.view_change,
            "products_live": dashboard.products_live,
        },
        from_attributes=True,
    )


# ---------------------------------------------------------------------------
# Tracking Router
# ---------------------------------------------------------------------------
tracking_router = APIRouter(prefix="/track-order", tags=["tracking"])


@tracking_router.get("", response_model=list[TrackedOrderSchema], dependencies=[Depends(tracking_limit)])
async def track_order(order_number: str | None = None, phone: str | None = None) -> list[TrackedOrderSchema]:
    result = track_orders(order_number=order_number, phone=phone)
    if result.state is TrackingState.NOT_FOUND:
        raise HTTPException(status_code=404, detail="No orders found")
    return [TrackedOrderSchema.model_validate(order, from_attributes=True) for order in result.orders]


# ---------------------------------------------------------------------------
# Delivery Locations Router
# ---------------------------------------------------------------------------
delivery_router = APIRouter(prefix="/delivery-locations", tags=["delivery"])


@delivery_router.get("", response_model=list[DeliveryLocationSchema])
async def list_delivery_locations() -> list[DeliveryLocationSchema]:
    return [
        DeliveryLocationSchema.model_validate(location, from_attributes=True)
        for location in get_catalogue().list_delivery_locations()
    ]


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


def _cart_response(cart: CartStore) -> CartResponse:
    return CartResponse(
        session_id=cart.session_id,
        lines=[
            CartLineSchema(
                product_id=str(line.product.id),
                name=line.product.name,
                unit_price=cart.unit_price(line),
                image=line.product.primary_image,
                quantity=line.quantity,
                variations=line.selected_variations,
                line_total=cart.unit_price(line) * line.quantity,
            )
            for line in cart.lines
        ],
        total_items=cart.total_items,
        total_price=cart.total_price,
    )


@cart_router.get("/{session_id}", response_model=CartResponse)
async def get_cart(session_id: str) -> CartResponse:
    return _cart_response(cart_for(session_id))


@cart_router.delete("/{session_id}", status_code=204)
async def end_cart_session(session_id: str) -> None:
    end_session(session_id)


@cart_router.post("/{session_id}/lines", response_model=CartResponse)
async def add_cart_line(session_id: str, body: AddCartLineRequest) -> CartResponse:
    product = get_catalogue().get_product(body.product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")

    cart = cart_for(session_id)
    cart.add_line(product, quantity=body.quantity, variations=body.variations)
    return _cart_response(cart)


@cart_router.put("/{session_id}/lines/{product_id}", response_model=CartResponse)
async def set_cart_line_quantity(session_id: str, product_id: str, body: SetQuantityRequest) -> CartResponse:
    cart = cart_for(session_id)
    cart.set_quantity(product_id, body.quantity)
    return _cart_response(cart)


@cart_router.delete("/{session_id}/lines/{product_id}", response_model=CartResponse)
async def remove_cart_line(session_id: str, product_id: str) -> CartResponse:
    cart = cart_for(session_id)
    cart.remove_line(product_id)
    return _cart_response(cart)


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


def _checkout_response(result: CheckoutResult) -> CheckoutResponse:
    return CheckoutResponse(
        order_number=result.order_number,
        order_id=result.order_id,
        ordered_via=result.ordered_via,
        payment_method=result.payment_method,
        chat_url=result.chat_url,
        persisted=result.persisted,
    )


@checkout_router.post("/{session_id}", status_code=201, response_model=CheckoutResponse)
async def checkout(session_id: str, body: CheckoutRequest) -> CheckoutResponse:
    channel = WhatsAppCheckout() if body.channel == "whatsapp" else WebsiteCheckout()
    result = await orchestrator_for(session_id).checkout(_customer_form(body.customer), channel)
    return _checkout_response(result)


@checkout_router.get("/{session_id}/mpesa", response_model=PaymentInstructionsResponse)
async def mpesa_instructions(
    session_id: str,
    name: str = "",
    phone: str = "",
    address: str = "",
    delivery_location_id: str = "",
) -> PaymentInstructionsResponse:
    orchestrator = orchestrator_for(session_id)
    form = CustomerForm(name=name, phone=phone, address=address, delivery_location_id=delivery_location_id)
    instructions = orchestrator.payment_instructions(form)
    quote = orchestrator.quote(form)
    return PaymentInstructionsResponse(
        till_number=instructions.till_number,
        business_name=instructions.business_name,
        amount_due=instructions.amount_due,
        subtotal=quote.subtotal,
        delivery_fee=quote.delivery_fee,
        free_shipping=quote.free_shipping,
    )


@checkout_router.post("/{session_id}/mpesa", status_code=201, response_model=CheckoutResponse)
async def confirm_mpesa(session_id: str, body: MpesaConfirmRequest) -> CheckoutResponse:
    channel = MpesaCheckout(message=body.message, manual_code=body.manual_code, manual_phone=body.manual_phone)
    result = await orchestrator_for(session_id).checkout(_customer_form(body.customer), channel)
    return _checkout_response(result)
