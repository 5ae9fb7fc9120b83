from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import List


def normalize_product_id(value) -> str:
    return str(value).strip()


@dataclass(frozen=True)
class ProductSnapshot:
    """Product fields captured when the product is put into the cart."""

    product_id: str
    name: str
    image: str
    price: Decimal
    count_in_stock: int


@dataclass(frozen=True)
class LineItem:
    product_id: str
    name: str
    image: str
    price: Decimal
    count_in_stock: int
    quantity: int

    @classmethod
    def from_snapshot(cls, snapshot: ProductSnapshot, quantity: int) -> "LineItem":
        return cls(
            product_id=normalize_product_id(snapshot.product_id),
            name=snapshot.name,
            image=snapshot.image,
            price=snapshot.price,
            count_in_stock=snapshot.count_in_stock,
            quantity=quantity,
        )

    def with_quantity(self, quantity: int) -> "LineItem":
        return replace(self, quantity=quantity)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


@dataclass
class Cart:
    items: List[LineItem] = field(default_factory=list)

    def index_of(self, product_id: str) -> int:
        product_id = normalize_product_id(product_id)
        for index, item in enumerate(self.items):
            if item.product_id == product_id:
                return index
        return -1

    def copy(self) -> "Cart":
        return Cart(items=list(self.items))

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class CartTotals:
    item_count: int
    subtotal: Decimal


@dataclass(frozen=True)
class CheckoutDecision:
    redirect: str
    requires_login: bool
