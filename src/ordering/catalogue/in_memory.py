"""In-memory catalogue adapter for development and testing."""

from ordering.catalogue.port import CatalogueDirectory, CatalogueProduct, DeliveryLocation


class InMemoryCatalogue(CatalogueDirectory):
    """Catalogue held in process memory, seeded by callers."""

    def __init__(
        self,
        products: list[CatalogueProduct] | None = None,
        delivery_locations: list[DeliveryLocation] | None = None,
    ) -> None:
        self._products: dict[str, CatalogueProduct] = {p.id: p for p in products or []}
        self._locations: dict[str, DeliveryLocation] = {loc.id: loc for loc in delivery_locations or []}

    def add_product(self, product: CatalogueProduct) -> None:
        self._products[product.id] = product

    def remove_product(self, product_id: str) -> None:
        self._products.pop(product_id, None)

    def add_delivery_location(self, location: DeliveryLocation) -> None:
        self._locations[location.id] = location

    def list_products(self) -> list[CatalogueProduct]:
        return list(self._products.values())

    def get_product(self, product_id: str) -> CatalogueProduct | None:
        return self._products.get(str(product_id))

    def list_delivery_locations(self) -> list[DeliveryLocation]:
        return list(self._locations.values())

    def get_delivery_location(self, location_id: str) -> DeliveryLocation | None:
        if not location_id:
            return None
        return self._locations.get(str(location_id))
