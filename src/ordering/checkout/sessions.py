"""Per-session carts and checkout orchestrators.

The HTTP surface is stateless between requests, so the cart and the
in-flight guard of each browsing session are kept here, keyed by session id.
"""

from ordering.cart.cart import CartStore
from ordering.cart.persistence import get_cart_persistence
from ordering.catalogue import get_catalogue
from ordering.checkout.gateway import get_order_gateway
from ordering.checkout.orchestrator import CheckoutOrchestrator

_orchestrators: dict[str, CheckoutOrchestrator] = {}


def orchestrator_for(session_id: str) -> CheckoutOrchestrator:
    """Return the session's orchestrator, creating it on first use."""
    orchestrator = _orchestrators.get(session_id)
    if orchestrator is None:
        catalogue = get_catalogue()
        cart = CartStore(session_id, persistence=get_cart_persistence(), catalogue=catalogue)
        orchestrator = CheckoutOrchestrator(cart, get_order_gateway(), catalogue=catalogue)
        _orchestrators[session_id] = orchestrator
    return orchestrator


def cart_for(session_id: str) -> CartStore:
    return orchestrator_for(session_id).cart


def end_session(session_id: str) -> None:
    """Drop everything held for a session; its cart does not outlive it."""
    _orchestrators.pop(session_id, None)
    get_cart_persistence().discard(session_id)


def reset_sessions() -> None:
    _orchestrators.clear()
