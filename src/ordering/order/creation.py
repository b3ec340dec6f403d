"""Order placement: command and handler.

The command carries the raw customer request. The handler runs it through
intake, resolves the delivery zone name from the catalogue, persists the
order in ``pending`` and sends a best-effort confirmation e-mail.
"""

import structlog
from protean import handle
from protean.fields import Float, String, Text
from protean.utils.globals import current_domain

from ordering.catalogue import get_catalogue
from ordering.domain import ordering
from ordering.notifications import get_email_sender
from ordering.notifications.order_confirmation import send_order_confirmation
from ordering.order.intake import clean_order_request
from ordering.order.order import Order, generate_order_number
from ordering.settings import get_settings

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class PlaceOrder:
    # Free-text fields are unbounded here; intake truncates them.
    customer_name = Text()
    customer_email = Text()
    customer_phone = Text()
    delivery_location_id = String(max_length=255)
    delivery_address = Text()
    notes = Text()
    items = Text()  # JSON: list of item dicts
    subtotal = Float(default=0.0)
    delivery_fee = Float(default=0.0)
    total = Float(default=0.0)
    ordered_via = String(max_length=50)
    payment_method = String(max_length=50)
    mpesa_code = Text()
    mpesa_phone = Text()
    mpesa_message = Text()


def _unique_order_number(repo) -> str:
    order_number = generate_order_number()
    while repo.find_by_order_number(order_number) is not None:
        # Two orders in the same millisecond; nudge to the next one.
        order_number = generate_order_number(int(order_number[3:].lower(), 36) + 1)
    return order_number


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        request = clean_order_request(
            {
                "customer_name": command.customer_name,
                "customer_email": command.customer_email,
                "customer_phone": command.customer_phone,
                "delivery_location_id": command.delivery_location_id,
                "delivery_address": command.delivery_address,
                "notes": command.notes,
                "items": command.items,
                "subtotal": command.subtotal,
                "delivery_fee": command.delivery_fee,
                "total": command.total,
                "ordered_via": command.ordered_via,
                "payment_method": command.payment_method,
                "mpesa_code": command.mpesa_code,
                "mpesa_phone": command.mpesa_phone,
                "mpesa_message": command.mpesa_message,
            }
        )

        location = get_catalogue().get_delivery_location(request["delivery_location_id"])

        repo = current_domain.repository_for(Order)
        order = Order.place(
            order_number=_unique_order_number(repo),
            delivery_location_name=location.name if location else None,
            **request,
        )
        repo.add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            ordered_via=order.ordered_via,
            payment_method=order.payment_method,
            total=order.total,
        )

        if order.customer_email:
            send_order_confirmation(
                get_email_sender(),
                to=order.customer_email,
                context={
                    "order_number": order.order_number,
                    "customer_name": order.customer_name,
                    "items": request["items"],
                    "subtotal": order.subtotal,
                    "delivery_fee": order.delivery_fee,
                    "total": order.total,
                    "delivery_address": order.delivery_address,
                    "payment_method": order.payment_method,
                    "mpesa_code": request["mpesa"]["code"],
                    "business_name": get_settings().business_name,
                },
            )

        return {"order_number": order.order_number, "order_id": str(order.id)}
