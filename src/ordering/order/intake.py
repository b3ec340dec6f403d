"""Server-side intake for incoming order requests.

Everything a customer sends is untrusted: strings are stripped of markup and
truncated, amounts are clamped, enumerations fall back to safe defaults, and
the contact details are validated before an order is ever built.
"""

import json
import math
import re

from protean.exceptions import ValidationError

from ordering.order.order import OrderChannel, PaymentMethod

MAX_ITEMS = 50
MIN_QUANTITY = 1
MAX_QUANTITY = 100

FIELD_LIMITS = {
    "customer_name": 100,
    "customer_email": 320,
    "customer_phone": 20,
    "delivery_address": 500,
    "notes": 1000,
    "mpesa_code": 12,
    "mpesa_phone": 20,
    "mpesa_message": 2000,
    "product_id": 50,
    "product_name": 200,
    "variation": 100,
    "product_image": 500,
}

_TAG_RE = re.compile(r"<[^>]*>")
_UNSAFE_CHARS_RE = re.compile(r"[<>\"'`;\\]")
_PHONE_SEPARATORS_RE = re.compile(r"[\s\-()]")
_KENYAN_PHONE_RE = re.compile(r"^(\+?254|0)[17]\d{8}$")
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def sanitize(value, max_length: int = 500) -> str:
    """Strip HTML tags and unsafe characters, trim, and truncate."""
    if not isinstance(value, str):
        return ""
    cleaned = _UNSAFE_CHARS_RE.sub("", _TAG_RE.sub("", value))
    return cleaned.strip()[:max_length]


def is_valid_phone(phone: str) -> bool:
    """Kenyan mobile number, tolerating spaces, dashes and parentheses."""
    return bool(_KENYAN_PHONE_RE.match(_PHONE_SEPARATORS_RE.sub("", phone or "")))


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email or "")) and len(email) <= 320


def clamp_amount(value) -> float:
    """Non-negative float; anything unparseable becomes 0."""
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(amount) or math.isinf(amount):
        return 0.0
    return max(0.0, amount)


def clamp_quantity(value) -> int:
    try:
        quantity = math.floor(float(value))
    except (TypeError, ValueError, OverflowError):
        return MIN_QUANTITY
    return min(MAX_QUANTITY, max(MIN_QUANTITY, quantity))


def normalize_payment_method(value) -> str:
    values = {m.value for m in PaymentMethod}
    return value if value in values else PaymentMethod.COD.value


def normalize_channel(value) -> str:
    values = {c.value for c in OrderChannel}
    return value if value in values else OrderChannel.WEBSITE.value


def _load_items(raw) -> list:
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            raise ValidationError({"items": ["Invalid items"]})
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValidationError({"items": ["Invalid items"]})
    return raw


def sanitize_item(raw: dict) -> dict:
    quantity = clamp_quantity(raw.get("quantity"))
    unit_price = clamp_amount(raw.get("unit_price"))
    variation = sanitize(raw.get("variation"), FIELD_LIMITS["variation"])
    image = sanitize(raw.get("product_image"), FIELD_LIMITS["product_image"])
    return {
        "product_id": sanitize(str(raw.get("product_id") or ""), FIELD_LIMITS["product_id"]),
        "product_name": sanitize(raw.get("product_name"), FIELD_LIMITS["product_name"]),
        "product_image": image or None,
        "variation": variation or None,
        "quantity": quantity,
        "unit_price": unit_price,
        "total_price": round(unit_price * quantity, 2),
    }


def clean_order_request(data: dict) -> dict:
    """Sanitize and validate a raw order request.

    Returns a dict ready for ``Order.place``. Raises ``ValidationError`` for
    missing contact details, a malformed phone or e-mail, or a bad item list.
    """
    name = sanitize(data.get("customer_name"), FIELD_LIMITS["customer_name"])
    email = sanitize(data.get("customer_email"), FIELD_LIMITS["customer_email"])
    phone = sanitize(data.get("customer_phone"), FIELD_LIMITS["customer_phone"])
    address = sanitize(data.get("delivery_address"), FIELD_LIMITS["delivery_address"])
    raw_items = _load_items(data.get("items"))

    missing = {}
    if not name:
        missing["customer_name"] = ["Customer name is required"]
    if not phone:
        missing["customer_phone"] = ["Customer phone is required"]
    if not address:
        missing["delivery_address"] = ["Delivery address is required"]
    if not raw_items:
        missing["items"] = ["At least one item is required"]
    if missing:
        raise ValidationError(missing)

    if not is_valid_phone(phone):
        raise ValidationError({"customer_phone": ["Invalid phone number format"]})
    if email and not is_valid_email(email):
        raise ValidationError({"customer_email": ["Invalid email address"]})
    if len(raw_items) > MAX_ITEMS or not all(isinstance(item, dict) for item in raw_items):
        raise ValidationError({"items": ["Invalid items"]})

    items = [sanitize_item(item) for item in raw_items]
    if any(not item["product_id"] or not item["product_name"] for item in items):
        raise ValidationError({"items": ["Every item needs a product id and name"]})

    return {
        "customer_name": name,
        "customer_email": email or None,
        "customer_phone": phone,
        "delivery_location_id": sanitize(str(data.get("delivery_location_id") or ""), 50) or None,
        "delivery_address": address,
        "notes": sanitize(data.get("notes"), FIELD_LIMITS["notes"]) or None,
        "items": items,
        "subtotal": clamp_amount(data.get("subtotal")),
        "delivery_fee": clamp_amount(data.get("delivery_fee")),
        "total": clamp_amount(data.get("total")),
        "ordered_via": normalize_channel(data.get("ordered_via")),
        "payment_method": normalize_payment_method(data.get("payment_method")),
        "mpesa": {
            "code": sanitize(data.get("mpesa_code"), FIELD_LIMITS["mpesa_code"]) or None,
            "phone": sanitize(data.get("mpesa_phone"), FIELD_LIMITS["mpesa_phone"]) or None,
            "message": sanitize(data.get("mpesa_message"), FIELD_LIMITS["mpesa_message"]) or None,
        },
    }
