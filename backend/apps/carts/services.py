from __future__ import annotations

from typing import Optional, Tuple

from apps.catalog.mappers import ProductMapper
from apps.common import get_logger

from .commands import CartAddCommand, CartQuantityCommand
from .dtos import Cart, CartTotals, CheckoutDecision
from .protocols import AuthMarkerProtocol, ProductLookupProtocol
from .reconciler import CartError, CartReconciler

logger = get_logger(__name__).bind(component="carts", layer="service")

SHIPPING_PATH = "/shipping"
LOGIN_PATH = "/login"


class ProductUnavailableError(CartError):
    """The product service could not be reached, so no snapshot exists to add."""

    def __init__(self, product_id: str, reason: Optional[str] = None):
        super().__init__(
            f"Product {product_id} could not be fetched",
            details={"productId": product_id},
        )
        self.product_id = product_id
        self.reason = reason


class ProductNotFoundError(CartError):
    def __init__(self, product_id: str):
        super().__init__(
            f"Product {product_id} does not exist", details={"productId": product_id}
        )
        self.product_id = product_id


class EmptyCartError(CartError):
    def __init__(self):
        super().__init__("Cart is empty")


class CartService:
    """
    Cart use cases for one session: product lookup first, then reconciliation.

    A lookup that fails or finds nothing never reaches the reconciler, so the
    stored cart only ever holds snapshots that really came from the product
    service.
    """

    def __init__(self, reconciler: CartReconciler, products: ProductLookupProtocol):
        self.reconciler = reconciler
        self.products = products
        self.logger = logger.bind(service="CartService")

    def get_cart(self) -> Tuple[Cart, CartTotals]:
        return self.reconciler.cart, self.reconciler.totals()

    def add_product(
        self, command: CartAddCommand, *, language: Optional[str] = None
    ) -> Tuple[Cart, CartTotals]:
        self.logger.debug(
            "Adding product to cart",
            product_id=command.product_id,
            quantity=command.quantity,
        )
        lookup = self.products.get_product(command.product_id, language=language)
        if lookup.degraded:
            self.logger.warning(
                "Add skipped: product service degraded",
                product_id=command.product_id,
                error=lookup.error,
            )
            raise ProductUnavailableError(command.product_id, lookup.error)
        if not lookup.ok or lookup.product is None:
            self.logger.info("Add skipped: product missing", product_id=command.product_id)
            raise ProductNotFoundError(command.product_id)
        snapshot = ProductMapper.to_snapshot(lookup.product)
        self.reconciler.add_or_update(snapshot, command.quantity)
        return self.get_cart()

    def set_quantity(self, command: CartQuantityCommand) -> Tuple[Cart, CartTotals]:
        self.reconciler.set_quantity(command.product_id, command.quantity)
        return self.get_cart()

    def remove_product(self, product_id: str) -> Tuple[Cart, CartTotals]:
        self.reconciler.remove(product_id)
        return self.get_cart()

    def clear(self) -> Tuple[Cart, CartTotals]:
        self.reconciler.clear()
        return self.get_cart()

    def begin_checkout(self, auth: AuthMarkerProtocol) -> CheckoutDecision:
        if not self.reconciler.items:
            self.logger.info("Checkout rejected: empty cart")
            raise EmptyCartError()
        if not auth.is_signed_in:
            self.logger.info("Checkout requires sign-in")
            return CheckoutDecision(
                redirect=f"{LOGIN_PATH}?redirect={SHIPPING_PATH.lstrip('/')}",
                requires_login=True,
            )
        self.logger.info("Checkout proceeding to shipping")
        return CheckoutDecision(redirect=SHIPPING_PATH, requires_login=False)
