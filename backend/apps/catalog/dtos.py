from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

LOOKUP_OK = "ok"
LOOKUP_NOT_FOUND = "not_found"
LOOKUP_DEGRADED = "degraded"


@dataclass
class ProductDTO:
    id: str
    name: str
    description: str
    price: Decimal
    image_url: str
    count_in_stock: int
    placeholder: bool = False


@dataclass
class ProductLookup:
    """Outcome of fetching one product from the product service."""

    status: str
    product: Optional[ProductDTO] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == LOOKUP_OK

    @property
    def degraded(self) -> bool:
        return self.status == LOOKUP_DEGRADED


@dataclass
class ProductListing:
    products: List[ProductDTO] = field(default_factory=list)
    degraded: bool = False
    error: Optional[str] = None
