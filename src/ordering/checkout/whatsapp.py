"""WhatsApp hand-off: order summary message and the chat launcher port."""

from abc import ABC, abstractmethod
from urllib.parse import quote

from ordering.cart.cart import CartStore, variation_label
from ordering.checkout.payload import CustomerForm, DeliveryQuote
from ordering.settings import get_settings
from ordering.utils.formatting import format_price


def build_order_message(cart: CartStore, form: CustomerForm, quote: DeliveryQuote) -> str:
    """Human-readable order summary, formatted for WhatsApp."""
    blocks = []
    for line in cart.lines:
        unit_price = cart.unit_price(line)
        block = f"*{line.product.name}*\n"
        if line.product.primary_image:
            block += f"Photo: {line.product.primary_image}\n"
        block += f"Qty: {line.quantity} × {format_price(unit_price)} = {format_price(unit_price * line.quantity)}"
        label = variation_label(line.selected_variations)
        if label:
            block += f"\n{label}"
        blocks.append(block)

    if quote.free_shipping:
        delivery = "FREE"
    elif quote.location:
        delivery = f"{format_price(quote.delivery_fee)} ({quote.location.name})"
    else:
        delivery = "Not selected"

    message = (
        "Hi! I'd like to place an order:\n\n"
        "*ORDER DETAILS*\n"
        + "\n\n".join(blocks)
        + f"\n\n*Subtotal:* {format_price(quote.subtotal)}"
        + f"\n*Delivery:* {delivery}"
        + f"\n*Total:* {format_price(quote.total)}"
        + "\n\n*CUSTOMER INFO*"
        + f"\nName: {form.name}"
        + f"\nPhone: {form.phone}"
    )
    if form.email:
        message += f"\nEmail: {form.email}"
    message += f"\nAddress: {form.address}"
    if form.notes:
        message += f"\nNotes: {form.notes}"
    return message


def chat_link(message: str, number: str | None = None) -> str:
    number = number or get_settings().whatsapp_number
    return f"https://wa.me/{number}?text={quote(message, safe='')}"


class ChatLauncher(ABC):
    """Opens a chat deep link outside the checkout's own lifecycle."""

    @abstractmethod
    def open(self, url: str) -> None: ...


class FakeChatLauncher(ChatLauncher):
    """Records opened links for test assertions."""

    def __init__(self):
        self.opened: list[str] = []

    def open(self, url: str) -> None:
        self.opened.append(url)

    def reset(self):
        self.opened.clear()


_current_launcher: ChatLauncher | None = None


def get_chat_launcher() -> ChatLauncher:
    """Return the active chat launcher. Defaults to FakeChatLauncher."""
    global _current_launcher
    if _current_launcher is None:
        _current_launcher = FakeChatLauncher()
    return _current_launcher


def set_chat_launcher(launcher: ChatLauncher) -> None:
    global _current_launcher
    _current_launcher = launcher


def reset_chat_launcher() -> None:
    global _current_launcher
    _current_launcher = None
