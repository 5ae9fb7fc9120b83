from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

from apps.common import get_logger

from .dtos import Cart, CartTotals, LineItem, ProductSnapshot, normalize_product_id
from .protocols import CartStorageProtocol

logger = get_logger(__name__).bind(component="carts", layer="reconciler")

_CENTS = Decimal("0.01")


class CartError(Exception):
    """Base class for rejected cart operations."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidQuantityError(CartError):
    """Raised when a requested quantity is not acceptable for the line item."""

    def __init__(
        self,
        quantity: Any,
        *,
        minimum: int = 1,
        maximum: Optional[int] = None,
        product_id: Optional[str] = None,
    ):
        if maximum is None:
            message = f"Quantity must be a positive integer, got {quantity!r}"
        else:
            message = (
                f"Quantity must be between {minimum} and {maximum}, got {quantity!r}"
            )
        details: Dict[str, Any] = {"quantity": quantity, "minimum": minimum}
        if maximum is not None:
            details["maximum"] = maximum
        if product_id is not None:
            details["productId"] = product_id
        super().__init__(message, details=details)
        self.quantity = quantity
        self.minimum = minimum
        self.maximum = maximum


class CartItemNotFoundError(CartError):
    """Raised when an operation targets a product that is not in the cart."""

    def __init__(self, product_id: str):
        super().__init__(
            f"Product {product_id} is not in the cart",
            details={"productId": product_id},
        )
        self.product_id = product_id


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class CartReconciler:
    """
    Owns the active session's cart and keeps the persisted slot in step with it.

    Merging is keyed on ``product_id``. Adding a product that is already in the
    cart replaces that entry wholesale (snapshot and quantity, last write
    wins) and keeps its position; new products are appended. Every successful
    mutation is written to storage before the method returns. Rejected
    operations leave both the in-memory cart and storage untouched.

    ``set_quantity`` rejects quantities outside ``[1, count_in_stock]``;
    ``add_or_update`` only rejects non-positive quantities and trusts the
    caller to respect the stock ceiling.
    """

    def __init__(self, storage: CartStorageProtocol):
        self.storage = storage
        self.logger = logger.bind(service="CartReconciler")
        self._cart = Cart()
        self.restore()

    @property
    def cart(self) -> Cart:
        return self._cart.copy()

    @property
    def items(self) -> List[LineItem]:
        return list(self._cart.items)

    def restore(self) -> Cart:
        self._cart = self.storage.load()
        self.logger.debug("Cart restored", items=len(self._cart))
        return self.cart

    def add_or_update(self, snapshot: ProductSnapshot, quantity: int) -> Cart:
        if not _is_positive_int(quantity):
            self.logger.warning(
                "Add rejected: invalid quantity",
                product_id=snapshot.product_id,
                quantity=quantity,
            )
            raise InvalidQuantityError(quantity, product_id=snapshot.product_id)
        item = LineItem.from_snapshot(snapshot, quantity)
        if not item.product_id:
            self.logger.warning("Add rejected: blank product id")
            raise CartError(
                "Product id must not be blank",
                details={"productId": snapshot.product_id},
            )
        updated = self._cart.copy()
        index = updated.index_of(item.product_id)
        if index == -1:
            updated.items.append(item)
            action = "appended"
        else:
            updated.items[index] = item
            action = "replaced"
        self._commit(updated)
        self.logger.info(
            "Cart item added",
            product_id=item.product_id,
            quantity=quantity,
            action=action,
        )
        return self.cart

    def remove(self, product_id: str) -> Cart:
        product_id = normalize_product_id(product_id)
        updated = Cart(
            items=[i for i in self._cart.items if i.product_id != product_id]
        )
        removed = len(updated) != len(self._cart)
        self._commit(updated)
        self.logger.info("Cart item removed", product_id=product_id, removed=removed)
        return self.cart

    def set_quantity(self, product_id: str, quantity: int) -> Cart:
        product_id = normalize_product_id(product_id)
        index = self._cart.index_of(product_id)
        if index == -1:
            self.logger.warning(
                "Quantity update rejected: item missing", product_id=product_id
            )
            raise CartItemNotFoundError(product_id)
        current = self._cart.items[index]
        if not _is_positive_int(quantity) or quantity > current.count_in_stock:
            self.logger.warning(
                "Quantity update rejected: out of range",
                product_id=product_id,
                quantity=quantity,
                count_in_stock=current.count_in_stock,
            )
            raise InvalidQuantityError(
                quantity,
                maximum=current.count_in_stock,
                product_id=product_id,
            )
        updated = self._cart.copy()
        updated.items[index] = current.with_quantity(quantity)
        self._commit(updated)
        self.logger.info(
            "Cart item quantity updated", product_id=product_id, quantity=quantity
        )
        return self.cart

    def clear(self) -> Cart:
        self._cart = Cart()
        self.storage.clear()
        self.logger.info("Cart cleared")
        return self.cart

    def totals(self) -> CartTotals:
        item_count = sum(i.quantity for i in self._cart.items)
        subtotal = sum((i.line_total for i in self._cart.items), Decimal("0"))
        return CartTotals(
            item_count=item_count,
            subtotal=subtotal.quantize(_CENTS, rounding=ROUND_HALF_UP),
        )

    def _commit(self, updated: Cart) -> None:
        # In-memory state only moves once the write has gone through.
        self.storage.save(updated)
        self._cart = updated
