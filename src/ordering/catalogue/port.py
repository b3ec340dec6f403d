"""Catalogue port (abstract interface).

Products and delivery locations are owned by the storefront's catalogue
screens. Ordering only reads them through this contract.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class CatalogueProduct:
    """A live catalogue product as seen by the cart and analytics."""

    id: str
    name: str
    price: float
    category: str = ""
    slug: str = ""
    images: tuple[str, ...] = field(default_factory=tuple)
    in_stock: bool = True

    @property
    def primary_image(self) -> str | None:
        return self.images[0] if self.images else None


@dataclass(frozen=True)
class DeliveryLocation:
    """A delivery zone with its flat fee."""

    id: str
    name: str
    fee: float
    estimated_days: str = ""


class CatalogueDirectory(ABC):
    """Abstract read-only catalogue interface."""

    @abstractmethod
    def list_products(self) -> list[CatalogueProduct]:
        """Return every product currently in the catalogue."""
        ...

    @abstractmethod
    def get_product(self, product_id: str) -> CatalogueProduct | None:
        """Return a product by id, or None when it no longer exists."""
        ...

    @abstractmethod
    def list_delivery_locations(self) -> list[DeliveryLocation]:
        """Return the configured delivery zones."""
        ...

    @abstractmethod
    def get_delivery_location(self, location_id: str) -> DeliveryLocation | None:
        """Return a delivery zone by id, or None."""
        ...
