"""Order request construction shared by every checkout channel."""

from dataclasses import asdict, dataclass, field, replace

from protean.exceptions import ValidationError

from ordering.cart.cart import CartStore, variation_label
from ordering.catalogue.port import CatalogueDirectory, DeliveryLocation
from ordering.settings import get_settings


@dataclass(frozen=True)
class CustomerForm:
    name: str
    phone: str
    address: str
    email: str = ""
    notes: str = ""
    delivery_location_id: str = ""

    def validate(self) -> None:
        """Name, phone and address must be filled in before anything is sent."""
        errors = {}
        if not (self.name or "").strip():
            errors["name"] = ["Full name is required"]
        if not (self.phone or "").strip():
            errors["phone"] = ["Phone number is required"]
        if not (self.address or "").strip():
            errors["address"] = ["Delivery address is required"]
        if errors:
            raise ValidationError(errors)


@dataclass(frozen=True)
class OrderRequest:
    customer_name: str
    customer_phone: str
    delivery_address: str
    subtotal: float
    delivery_fee: float
    total: float
    ordered_via: str
    payment_method: str
    items: list[dict] = field(default_factory=list)
    customer_email: str | None = None
    delivery_location_id: str | None = None
    notes: str | None = None
    mpesa_code: str | None = None
    mpesa_phone: str | None = None
    mpesa_message: str | None = None
    status: str = "pending"

    def with_mpesa(self, code: str | None, phone: str | None, message: str) -> "OrderRequest":
        return replace(self, mpesa_code=code, mpesa_phone=phone, mpesa_message=message)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class DeliveryQuote:
    subtotal: float
    delivery_fee: float
    total: float
    free_shipping: bool
    location: DeliveryLocation | None = None


def quote_delivery(subtotal: float, location: DeliveryLocation | None) -> DeliveryQuote:
    """Apply the free-shipping threshold to the selected zone's fee."""
    fee = location.fee if location else 0.0
    free_shipping = subtotal >= get_settings().free_shipping_threshold
    if free_shipping:
        return DeliveryQuote(subtotal=subtotal, delivery_fee=0.0, total=subtotal, free_shipping=True, location=location)
    return DeliveryQuote(
        subtotal=subtotal, delivery_fee=fee, total=subtotal + fee, free_shipping=False, location=location
    )


def build_order_request(
    cart: CartStore,
    form: CustomerForm,
    catalogue: CatalogueDirectory,
    ordered_via: str = "website",
    payment_method: str = "cod",
) -> OrderRequest:
    """Snapshot the cart and customer details into an order request."""
    location = catalogue.get_delivery_location(form.delivery_location_id)
    quote = quote_delivery(cart.total_price, location)

    items = []
    for line in cart.lines:
        unit_price = cart.unit_price(line)
        items.append(
            {
                "product_id": str(line.product.id),
                "product_name": line.product.name,
                "product_image": line.product.primary_image,
                "variation": variation_label(line.selected_variations),
                "quantity": line.quantity,
                "unit_price": unit_price,
                "total_price": unit_price * line.quantity,
            }
        )

    return OrderRequest(
        customer_name=form.name.strip(),
        customer_phone=form.phone.strip(),
        customer_email=form.email.strip() or None,
        delivery_location_id=form.delivery_location_id or None,
        delivery_address=form.address.strip(),
        notes=form.notes.strip() or None,
        items=items,
        subtotal=quote.subtotal,
        delivery_fee=quote.delivery_fee,
        total=quote.total,
        ordered_via=ordered_via,
        payment_method=payment_method,
    )
