import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture

from ordering.analytics.traffic import reset_traffic_feed
from ordering.api.rate_limit import reset_rate_limits
from ordering.cart.persistence import reset_cart_persistence
from ordering.catalogue import reset_catalogue
from ordering.checkout.gateway import reset_order_gateway
from ordering.checkout.sessions import reset_sessions
from ordering.checkout.whatsapp import reset_chat_launcher
from ordering.notifications import reset_email_sender
from ordering.settings import reset_settings


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def _reset_adapters():
    """Swap every module-level adapter back to its default after each test."""
    yield
    reset_sessions()
    reset_cart_persistence()
    reset_catalogue()
    reset_order_gateway()
    reset_chat_launcher()
    reset_email_sender()
    reset_traffic_feed()
    reset_settings()
    reset_rate_limits()


# ---------------------------------------------------------------------------
# Shared storefront fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def catalogue():
    from ordering.catalogue import set_catalogue
    from ordering.catalogue.in_memory import InMemoryCatalogue
    from ordering.catalogue.port import CatalogueProduct, DeliveryLocation

    directory = InMemoryCatalogue(
        products=[
            CatalogueProduct(
                id="prod-dress",
                name="Linen Dress",
                price=1000.0,
                category="Dresses",
                images=("https://cdn.example.com/dress.jpg",),
            ),
            CatalogueProduct(id="prod-bag", name="Leather Bag", price=2500.0, category="Bags"),
            CatalogueProduct(id="prod-scarf", name="Silk Scarf", price=450.0, category="Accessories"),
        ],
        delivery_locations=[
            DeliveryLocation(id="loc-cbd", name="Nairobi CBD", fee=200.0, estimated_days="1-2 days"),
            DeliveryLocation(id="loc-mombasa", name="Mombasa", fee=500.0, estimated_days="3-5 days"),
        ],
    )
    set_catalogue(directory)
    return directory


@pytest.fixture()
def email_sender():
    from ordering.notifications import set_email_sender
    from ordering.notifications.fake_email import FakeEmailAdapter

    sender = FakeEmailAdapter()
    set_email_sender(sender)
    return sender
