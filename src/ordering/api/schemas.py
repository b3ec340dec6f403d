"""Pydantic request/response schemas for the storefront ordering API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands. The storefront speaks camelCase JSON; fields are
snake_case here and aliased on the wire.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


# ---------------------------------------------------------------------------
# Order intake
# ---------------------------------------------------------------------------
class OrderItemSchema(CamelModel):
    product_id: str = ""
    product_name: str = ""
    product_image: str | None = None
    variation: str | None = None
    quantity: float = 1
    unit_price: float = 0.0
    total_price: float = 0.0


class CreateOrderRequest(CamelModel):
    """Everything is optional at the schema level; intake decides what is valid."""

    customer_name: str = ""
    customer_email: str | None = None
    customer_phone: str = ""
    delivery_location_id: str | None = None
    delivery_address: str = ""
    delivery_fee: float = 0.0
    subtotal: float = 0.0
    total: float = 0.0
    notes: str | None = None
    ordered_via: str = "website"
    payment_method: str | None = None
    mpesa_code: str | None = None
    mpesa_phone: str | None = None
    mpesa_message: str | None = None
    status: str | None = None
    items: list[OrderItemSchema] = Field(default_factory=list)

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "customerName": "Jane Wanjiku",
                    "customerPhone": "0712345678",
                    "deliveryAddress": "Moi Avenue, Nairobi",
                    "deliveryFee": 200,
                    "subtotal": 2000,
                    "total": 2200,
                    "orderedVia": "website",
                    "items": [
                        {
                            "productId": "prod-001",
                            "productName": "Linen Dress",
                            "quantity": 2,
                            "unitPrice": 1000,
                            "totalPrice": 2000,
                        }
                    ],
                }
            ]
        },
    }


class OrderCreatedResponse(CamelModel):
    order_number: str
    order_id: str


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------
class UpdateStatusRequest(BaseModel):
    id: str
    status: str


class MessageResponse(BaseModel):
    message: str


class AdminOrderItemSchema(CamelModel):
    product_id: str
    product_name: str
    product_image: str | None = None
    variation: str | None = None
    quantity: int
    unit_price: float
    total_price: float


class AdminOrderSchema(CamelModel):
    id: str
    order_number: str
    customer_name: str
    customer_phone: str
    customer_email: str | None = None
    delivery_address: str
    delivery_location: str | None = None
    notes: str | None = None
    status: str
    ordered_via: str
    payment_method: str
    subtotal: float
    delivery_fee: float
    total: float
    created_at: datetime | None = None
    items: list[AdminOrderItemSchema] = Field(default_factory=list)
    mpesa_code: str | None = None
    mpesa_phone: str | None = None
    mpesa_message: str | None = None


class AdminOrderListResponse(CamelModel):
    orders: list[AdminOrderSchema]
    page: int
    per_page: int
    total_items: int
    total_pages: int
    stats: dict[str, int]


class PendingCountResponse(BaseModel):
    count: int


class BulkDeleteResponse(CamelModel):
    requested: int
    deleted: int
    message: str


# ---------------------------------------------------------------------------
# Tracking
# ---------------------------------------------------------------------------
class TrackedItemSchema(CamelModel):
    name: str
    qty: int
    price: float
    variation: str | None = None
    image: str | None = None


class TrackedOrderSchema(CamelModel):
    id: str
    order_number: str
    customer: str
    phone: str
    items: list[TrackedItemSchema]
    subtotal: float
    delivery_fee: float
    total: float
    location: str
    address: str
    status: str
    created_at: datetime | None = None
    timeline_position: int | None = None
    is_cancelled: bool = False


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------
class SummarySchema(CamelModel):
    total_orders: int
    pending_orders: int
    total_sales: int
    total_revenue: float


class ProductSalesSchema(CamelModel):
    name: str
    sold: int
    revenue: float


class CategorySalesSchema(CamelModel):
    name: str
    sold: int
    revenue: float
    percentage: int


class ActivitySchema(CamelModel):
    action: str
    detail: str
    time: str
    order_id: str


class PagedProductsSchema(CamelModel):
    items: list[ProductSalesSchema]
    page: int
    total_pages: int


class PagedActivitySchema(CamelModel):
    items: list[ActivitySchema]
    page: int
    total_pages: int


class TrafficSchema(CamelModel):
    total_views: int = 0
    unique_sessions: int = 0
    previous_period_views: int = 0
    top_pages: list[dict] = Field(default_factory=list)
    views_by_day: list[dict] = Field(default_factory=list)
    devices: list[dict] = Field(default_factory=list)
    browsers: list[dict] = Field(default_factory=list)
    countries: list[dict] = Field(default_factory=list)
    referrers: list[dict] = Field(default_factory=list)


class DashboardResponse(CamelModel):
    summary: SummarySchema
    revenue_by_month: list[dict]
    top_products: PagedProductsSchema
    categories: list[CategorySalesSchema]
    activity: PagedActivitySchema
    traffic: TrafficSchema
    view_change: int
    products_live: int


# ---------------------------------------------------------------------------
# Delivery locations
# ---------------------------------------------------------------------------
class DeliveryLocationSchema(CamelModel):
    id: str
    name: str
    fee: float
    estimated_days: str = ""


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddCartLineRequest(CamelModel):
    product_id: str
    quantity: int = 1
    variations: dict[str, str] = Field(default_factory=dict)


class SetQuantityRequest(CamelModel):
    quantity: int


class CartLineSchema(CamelModel):
    product_id: str
    name: str
    unit_price: float
    image: str | None = None
    quantity: int
    variations: dict[str, str] = Field(default_factory=dict)
    line_total: float


class CartResponse(CamelModel):
    session_id: str
    lines: list[CartLineSchema]
    total_items: int
    total_price: float


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class CustomerFormSchema(CamelModel):
    name: str = ""
    phone: str = ""
    address: str = ""
    email: str = ""
    notes: str = ""
    delivery_location_id: str = ""


class CheckoutRequest(CamelModel):
    channel: Literal["website", "whatsapp"] = "website"
    customer: CustomerFormSchema


class MpesaConfirmRequest(CamelModel):
    customer: CustomerFormSchema
    message: str = ""
    manual_code: str = ""
    manual_phone: str = ""


class CheckoutResponse(CamelModel):
    order_number: str
    order_id: str | None = None
    ordered_via: str
    payment_method: str
    chat_url: str | None = None
    persisted: bool = True


class PaymentInstructionsResponse(CamelModel):
    till_number: str
    business_name: str
    amount_due: float
    subtotal: float
    delivery_fee: float
    free_shipping: bool
