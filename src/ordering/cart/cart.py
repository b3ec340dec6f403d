"""Session cart: the line items a shopper has picked before checkout.

The cart is an injectable store rather than an aggregate: it is owned by one
browsing session, is never shared, and is saved through a CartPersistence
port after every mutation. Lines are merged by product id plus a canonical
serialization of the selected variations, so adding the same product and
variation twice only bumps the quantity.

None of the operations raise. Bad input (non-positive quantities, missing
products) degrades to a no-op or a removal.
"""

import json
from dataclasses import dataclass, field

import structlog

from ordering.cart.persistence import CartPersistence, get_cart_persistence
from ordering.catalogue.port import CatalogueDirectory, CatalogueProduct

logger = structlog.get_logger(__name__)


def variation_signature(variations: dict[str, str] | None) -> str:
    """Canonical, order-independent serialization of selected variations."""
    return json.dumps(variations or {}, sort_keys=True, separators=(",", ":"))


def variation_label(variations: dict[str, str] | None) -> str | None:
    """Human label such as ``"Size: M, Color: Black"``."""
    if not variations:
        return None
    return ", ".join(f"{kind}: {option}" for kind, option in variations.items())


@dataclass
class CartLine:
    product: CatalogueProduct
    quantity: int
    selected_variations: dict[str, str] = field(default_factory=dict)

    @property
    def key(self) -> tuple[str, str]:
        return (str(self.product.id), variation_signature(self.selected_variations))

    def to_dict(self) -> dict:
        return {
            "product": {
                "id": self.product.id,
                "name": self.product.name,
                "price": self.product.price,
                "category": self.product.category,
                "slug": self.product.slug,
                "images": list(self.product.images),
                "in_stock": self.product.in_stock,
            },
            "quantity": self.quantity,
            "selected_variations": dict(self.selected_variations),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartLine":
        product_data = dict(data["product"])
        product_data["images"] = tuple(product_data.get("images") or ())
        return cls(
            product=CatalogueProduct(**product_data),
            quantity=int(data["quantity"]),
            selected_variations=dict(data.get("selected_variations") or {}),
        )


class CartStore:
    """Cart for a single session, persisted through a CartPersistence port.

    When a catalogue is supplied, prices are read from the live catalogue so the
    cart always reflects the current price rather than the price at add time.
    """

    def __init__(
        self,
        session_id: str,
        persistence: CartPersistence | None = None,
        catalogue: CatalogueDirectory | None = None,
    ) -> None:
        self.session_id = session_id
        self.persistence = persistence or get_cart_persistence()
        self.catalogue = catalogue
        self.is_open = False
        self._lines: list[CartLine] = [CartLine.from_dict(raw) for raw in self.persistence.load(session_id)]

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def unit_price(self, line: CartLine) -> float:
        """Current price for a line, preferring the live catalogue record."""
        if self.catalogue is not None:
            live = self.catalogue.get_product(line.product.id)
            if live is not None:
                return live.price
        return line.product.price

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self._lines)

    @property
    def total_price(self) -> float:
        return sum(self.unit_price(line) * line.quantity for line in self._lines)

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add_line(self, product: CatalogueProduct | None, quantity: int = 1, variations: dict[str, str] | None = None):
        """Add a product (merging with an identical product+variation line)."""
        if product is None or quantity is None or quantity < 1:
            return

        candidate = CartLine(product=product, quantity=quantity, selected_variations=dict(variations or {}))
        existing = next((line for line in self._lines if line.key == candidate.key), None)
        if existing:
            existing.quantity += quantity
        else:
            self._lines.append(candidate)

        self.is_open = True
        self._save()
        logger.debug(
            "Cart line added",
            session_id=self.session_id,
            product_id=str(product.id),
            quantity=quantity,
            merged=existing is not None,
        )

    def remove_line(self, product_id: str) -> None:
        """Remove every line for the product, whatever variation it carries."""
        remaining = [line for line in self._lines if str(line.product.id) != str(product_id)]
        if len(remaining) == len(self._lines):
            return
        self._lines = remaining
        self._save()

    def set_quantity(self, product_id: str, quantity: int) -> None:
        """Set the quantity for a product; zero or less removes it."""
        if quantity is None or quantity <= 0:
            self.remove_line(product_id)
            return

        changed = False
        for line in self._lines:
            if str(line.product.id) == str(product_id):
                line.quantity = quantity
                changed = True
        if changed:
            self._save()

    def clear(self) -> None:
        self._lines = []
        self._save()

    def _save(self) -> None:
        self.persistence.save(self.session_id, [line.to_dict() for line in self._lines])
