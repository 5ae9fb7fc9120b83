from __future__ import annotations

from typing import Any, MutableMapping, Optional

from django.core import signing

from apps.common import get_logger

from .dtos import Cart
from .mappers import CartSnapshotMapper, MalformedCartStateError
from .reconciler import CartError

logger = get_logger(__name__).bind(component="carts", layer="storage")

DEFAULT_CART_STORAGE_KEY = "cartItems"
SIGNED_COOKIE_SALT = "django.contrib.sessions.backends.signed_cookies"


class CartStorageLimitError(CartError):
    """Raised when the encoded session would no longer fit its storage budget."""

    def __init__(self, size: int, max_bytes: int):
        super().__init__(
            f"Cart is too large to save ({size} bytes, limit {max_bytes})",
            details={"size": size, "maxBytes": max_bytes},
        )
        self.size = size
        self.max_bytes = max_bytes


class KeyValueCartStorage:
    """
    Cart persistence over a single string-keyed slot of a mutable mapping.

    The slot holds the serialized snapshot, never the live Cart, so every
    ``load`` hands back a fresh object.
    """

    def __init__(
        self,
        slot: MutableMapping[str, Any],
        key: str = DEFAULT_CART_STORAGE_KEY,
        mapper: Optional[CartSnapshotMapper] = None,
    ):
        self.slot = slot
        self.key = key
        self.mapper = mapper or CartSnapshotMapper()
        self.logger = logger.bind(storage=self.__class__.__name__, key=key)

    def load(self) -> Cart:
        raw = self.slot.get(self.key)
        if raw is None:
            self.logger.debug("No persisted cart found")
            return Cart()
        try:
            cart = self.mapper.loads(raw)
        except MalformedCartStateError as exc:
            self.logger.warning("Discarding malformed persisted cart", error=str(exc))
            return Cart()
        self.logger.debug("Persisted cart restored", items=len(cart))
        return cart

    def save(self, cart: Cart) -> None:
        data = self.mapper.dumps(cart)
        self._check_capacity(cart, data)
        self.slot[self.key] = data
        self._mark_modified()
        self.logger.debug("Cart persisted", items=len(cart))

    def clear(self) -> None:
        if self.key in self.slot:
            del self.slot[self.key]
            self._mark_modified()
        self.logger.debug("Persisted cart cleared")

    def _check_capacity(self, cart: Cart, data: str) -> None:
        pass

    def _mark_modified(self) -> None:
        pass


class SessionCartStorage(KeyValueCartStorage):
    """
    Stores the cart slot in the Django session of the current visitor.

    With ``max_bytes`` set, each save first encodes the whole session the way
    the signed-cookie engine does and refuses the write if the cookie would
    exceed the budget. Browsers drop oversized cookies without telling the
    server, so the cart would otherwise stop persisting silently.
    """

    def __init__(
        self,
        session,
        key: str = DEFAULT_CART_STORAGE_KEY,
        mapper=None,
        max_bytes: Optional[int] = None,
    ):
        super().__init__(session, key=key, mapper=mapper)
        self.max_bytes = max_bytes

    def encoded_size(self, data: str) -> int:
        values = dict(self.slot)
        values[self.key] = data
        serializer = getattr(self.slot, "serializer", signing.JSONSerializer)
        return len(
            signing.dumps(
                values, salt=SIGNED_COOKIE_SALT, serializer=serializer, compress=True
            )
        )

    def _check_capacity(self, cart: Cart, data: str) -> None:
        if self.max_bytes is None:
            return
        size = self.encoded_size(data)
        if size > self.max_bytes:
            self.logger.warning(
                "Cart save refused: session cookie over budget",
                items=len(cart),
                size=size,
                max_bytes=self.max_bytes,
            )
            raise CartStorageLimitError(size, self.max_bytes)

    def _mark_modified(self) -> None:
        self.slot.modified = True
