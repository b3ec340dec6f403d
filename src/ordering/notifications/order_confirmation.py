"""Order confirmation e-mail: rendered from a placed order and sent best-effort."""

import structlog

from ordering.notifications.email_port import EmailMessage, EmailPort
from ordering.utils.formatting import format_price

logger = structlog.get_logger(__name__)


def payment_label(method: str, mpesa_code: str | None = None) -> str:
    if method == "mpesa":
        return f"M-PESA ({mpesa_code})" if mpesa_code else "M-PESA"
    if method == "whatsapp":
        return "WhatsApp Order"
    return "Cash on Delivery"


class OrderConfirmationTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        business_name = context.get("business_name", "")

        lines = []
        for item in context.get("items", []):
            label = item["product_name"]
            if item.get("variation"):
                label = f"{label} ({item['variation']})"
            lines.append(f"  {item['quantity']} x {label} - {format_price(item['total_price'])}")

        body = "\n".join(
            [
                f"Hi {context.get('customer_name', '')},",
                "",
                f"Thank you for your order {order_number}. We have received it and will be in touch shortly.",
                "",
                *lines,
                "",
                f"Subtotal: {format_price(context.get('subtotal'))}",
                f"Delivery: {format_price(context.get('delivery_fee'))}",
                f"Total: {format_price(context.get('total'))}",
                "",
                f"Delivery address: {context.get('delivery_address', '')}",
                f"Payment: {payment_label(context.get('payment_method', 'cod'), context.get('mpesa_code'))}",
                "",
                f"Thank you for shopping with {business_name}!",
            ]
        )
        return {
            "subject": f"Order Confirmed - {order_number} | {business_name}",
            "body": body,
        }


def send_order_confirmation(sender: EmailPort, to: str, context: dict) -> bool:
    """Send the confirmation e-mail. Failures are logged, never raised."""
    content = OrderConfirmationTemplate.render(context)
    message = EmailMessage(to=to, subject=content["subject"], body=content["body"])
    try:
        receipt = sender.deliver(message)
    except Exception as exc:
        logger.warning(
            "Order confirmation email failed",
            order_number=context.get("order_number"),
            error=str(exc),
        )
        return False

    if not receipt.delivered:
        logger.warning(
            "Order confirmation email rejected",
            order_number=context.get("order_number"),
            error=receipt.error,
        )
        return False

    logger.info(
        "Order confirmation email sent",
        order_number=context.get("order_number"),
        message_id=receipt.message_id,
    )
    return True
