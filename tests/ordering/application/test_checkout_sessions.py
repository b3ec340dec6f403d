"""Application tests for per-session carts and orchestrators."""

from ordering.cart.persistence import get_cart_persistence
from ordering.checkout.sessions import cart_for, end_session, orchestrator_for


class TestSessions:
    def test_orchestrator_is_reused_within_session(self, catalogue):
        assert orchestrator_for("sess-a") is orchestrator_for("sess-a")
        assert orchestrator_for("sess-a") is not orchestrator_for("sess-b")

    def test_carts_are_isolated(self, catalogue):
        cart_for("sess-a").add_line(catalogue.get_product("prod-bag"), 1)

        assert cart_for("sess-a").total_items == 1
        assert cart_for("sess-b").is_empty

    def test_cart_reads_live_catalogue_prices(self, catalogue):
        cart = cart_for("sess-a")
        cart.add_line(catalogue.get_product("prod-scarf"), 2)

        assert cart.total_price == 900.0

    def test_end_session_discards_cart(self, catalogue):
        cart_for("sess-a").add_line(catalogue.get_product("prod-bag"), 1)

        end_session("sess-a")

        assert "sess-a" not in get_cart_persistence().session_ids
        assert cart_for("sess-a").is_empty
