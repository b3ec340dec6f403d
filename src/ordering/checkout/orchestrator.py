"""Checkout orchestration: turns a session cart into an order.

Three channels share one payload builder and differ only in how the order is
submitted:

- website: cash on delivery. The order must persist before the cart clears.
- whatsapp: persistence is best-effort; the chat hand-off is what the buyer
  sees, so success is reported even when the order could not be saved.
- mpesa: the buyer pays the till number and pastes the confirmation SMS,
  which must pass the parser gate before anything is submitted.

One submission may be in flight per orchestrator. A second call while the
first is awaiting the gateway raises ``CheckoutInProgress``.
"""

from dataclasses import dataclass
from enum import Enum

import structlog
from protean.exceptions import ValidationError

from ordering.cart.cart import CartStore
from ordering.catalogue import get_catalogue
from ordering.catalogue.port import CatalogueDirectory
from ordering.checkout import mpesa
from ordering.checkout.channels import CheckoutChannel, MpesaCheckout, WebsiteCheckout, WhatsAppCheckout
from ordering.checkout.gateway import OrderGateway
from ordering.checkout.payload import CustomerForm, DeliveryQuote, OrderRequest, build_order_request, quote_delivery
from ordering.checkout.whatsapp import ChatLauncher, build_order_message, chat_link, get_chat_launcher
from ordering.errors import BestEffortFailure, CheckoutInProgress

logger = structlog.get_logger(__name__)

WHATSAPP_ORDER_NUMBER = "WhatsApp"


class CheckoutState(Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    AWAITING_PAYMENT = "awaiting_payment"
    COMPLETED = "completed"


@dataclass(frozen=True)
class CheckoutResult:
    order_number: str
    ordered_via: str
    payment_method: str
    order_id: str | None = None
    chat_url: str | None = None
    persisted: bool = True


class CheckoutOrchestrator:
    def __init__(
        self,
        cart: CartStore,
        gateway: OrderGateway,
        catalogue: CatalogueDirectory | None = None,
        chat_launcher: ChatLauncher | None = None,
    ) -> None:
        self.cart = cart
        self.gateway = gateway
        self.catalogue = catalogue or get_catalogue()
        self.chat_launcher = chat_launcher
        self.state = CheckoutState.IDLE
        self.last_result: CheckoutResult | None = None

        self._handlers = {
            WebsiteCheckout: self._checkout_website,
            WhatsAppCheckout: self._checkout_whatsapp,
            MpesaCheckout: self._checkout_mpesa,
        }

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    @property
    def is_submitting(self) -> bool:
        return self.state is CheckoutState.SUBMITTING

    def quote(self, form: CustomerForm) -> DeliveryQuote:
        location = self.catalogue.get_delivery_location(form.delivery_location_id)
        return quote_delivery(self.cart.total_price, location)

    def payment_instructions(self, form: CustomerForm) -> mpesa.PaymentInstructions:
        """Open the M-Pesa payment step: till number and the amount to pay."""
        self._check_ready(form)
        if self.state is not CheckoutState.SUBMITTING:
            self.state = CheckoutState.AWAITING_PAYMENT
        return mpesa.payment_instructions(self.quote(form).total)

    # -------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------
    async def checkout(self, form: CustomerForm, channel: CheckoutChannel) -> CheckoutResult:
        if self.state is CheckoutState.SUBMITTING:
            raise CheckoutInProgress("A checkout is already being submitted")

        handler = self._handlers.get(type(channel))
        if handler is None:
            raise TypeError(f"Unsupported checkout channel: {type(channel).__name__}")

        self._check_ready(form)

        resume_state = self.state
        self.state = CheckoutState.SUBMITTING
        try:
            result = await handler(form, channel)
        except Exception:
            self.state = resume_state
            raise

        self.state = CheckoutState.COMPLETED
        self.last_result = result
        logger.info(
            "Checkout completed",
            session_id=self.cart.session_id,
            order_number=result.order_number,
            ordered_via=result.ordered_via,
            persisted=result.persisted,
        )
        return result

    def _check_ready(self, form: CustomerForm) -> None:
        form.validate()
        if self.cart.is_empty:
            raise ValidationError({"cart": ["Your cart is empty"]})

    def _request(self, form: CustomerForm, ordered_via: str, payment_method: str) -> OrderRequest:
        return build_order_request(self.cart, form, self.catalogue, ordered_via, payment_method)

    # -------------------------------------------------------------------
    # Channel handlers
    # -------------------------------------------------------------------
    async def _checkout_website(self, form: CustomerForm, channel: WebsiteCheckout) -> CheckoutResult:
        receipt = await self.gateway.submit(self._request(form, "website", "cod"))
        self.cart.clear()
        return CheckoutResult(
            order_number=receipt.order_number,
            order_id=receipt.order_id,
            ordered_via="website",
            payment_method="cod",
        )

    async def _checkout_whatsapp(self, form: CustomerForm, channel: WhatsAppCheckout) -> CheckoutResult:
        request = self._request(form, "whatsapp", "whatsapp")

        persisted = True
        try:
            await self._persist_best_effort(request)
        except BestEffortFailure as exc:
            persisted = False
            logger.warning("WhatsApp order not saved", session_id=self.cart.session_id, error=str(exc))

        url = chat_link(build_order_message(self.cart, form, self.quote(form)))
        (self.chat_launcher or get_chat_launcher()).open(url)
        self.cart.clear()

        return CheckoutResult(
            order_number=WHATSAPP_ORDER_NUMBER,
            ordered_via="whatsapp",
            payment_method="whatsapp",
            chat_url=url,
            persisted=persisted,
        )

    async def _persist_best_effort(self, request: OrderRequest) -> None:
        try:
            await self.gateway.submit(request)
        except Exception as exc:
            raise BestEffortFailure(str(exc)) from exc

    async def _checkout_mpesa(self, form: CustomerForm, channel: MpesaCheckout) -> CheckoutResult:
        confirmation = mpesa.parse(channel.message, channel.manual_code, channel.manual_phone)

        request = self._request(form, "mpesa", "mpesa").with_mpesa(
            code=confirmation.code or None,
            phone=confirmation.phone or form.phone.strip(),
            message=confirmation.message,
        )
        receipt = await self.gateway.submit(request)
        self.cart.clear()
        return CheckoutResult(
            order_number=receipt.order_number,
            order_id=receipt.order_id,
            ordered_via="mpesa",
            payment_method="mpesa",
        )
