"""Catalogue directory factory.

Provides get_catalogue() / set_catalogue() to swap implementations. Defaults
to an empty InMemoryCatalogue.
"""

from ordering.catalogue.in_memory import InMemoryCatalogue
from ordering.catalogue.port import CatalogueDirectory

_current_catalogue: CatalogueDirectory | None = None


def get_catalogue() -> CatalogueDirectory:
    """Return the current catalogue directory. Defaults to InMemoryCatalogue."""
    global _current_catalogue
    if _current_catalogue is None:
        _current_catalogue = InMemoryCatalogue()
    return _current_catalogue


def set_catalogue(catalogue: CatalogueDirectory) -> None:
    """Override the active catalogue directory (useful for tests)."""
    global _current_catalogue
    _current_catalogue = catalogue


def reset_catalogue() -> None:
    """Reset to default catalogue."""
    global _current_catalogue
    _current_catalogue = None
