"""Checkout channels: the closed set of ways a cart can become an order."""

from dataclasses import dataclass


@dataclass(frozen=True)
class WebsiteCheckout:
    """Cash on delivery, placed directly on the website."""


@dataclass(frozen=True)
class WhatsAppCheckout:
    """Hand the order over to a WhatsApp chat with the store."""


@dataclass(frozen=True)
class MpesaCheckout:
    """Pay the till number, then confirm with the pasted M-Pesa message."""

    message: str
    manual_code: str = ""
    manual_phone: str = ""


CheckoutChannel = WebsiteCheckout | WhatsAppCheckout | MpesaCheckout
