from __future__ import annotations

from typing import Optional, Protocol, TYPE_CHECKING

from .dtos import Cart

if TYPE_CHECKING:
    from apps.catalog.dtos import ProductLookup


class CartStorageProtocol(Protocol):
    def load(self) -> Cart:
        ...

    def save(self, cart: Cart) -> None:
        ...

    def clear(self) -> None:
        ...


class ProductLookupProtocol(Protocol):
    def get_product(
        self, product_id: str, *, language: Optional[str] = None
    ) -> "ProductLookup":
        ...


class AuthMarkerProtocol(Protocol):
    @property
    def is_signed_in(self) -> bool:
        ...
