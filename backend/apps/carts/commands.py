from dataclasses import dataclass
from typing import Any, Mapping, Optional

DEFAULT_ADD_QUANTITY = 1


def _clean_product_id(value: Any) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    pid = str(value).strip()
    return pid or None


def _query_quantity(value: Any) -> Any:
    # Non-numeric values pass through untouched; the reconciler rejects them.
    try:
        return int(str(value).strip())
    except ValueError:
        return value


@dataclass
class CartAddCommand:
    product_id: str
    quantity: Any

    @staticmethod
    def from_raw(
        raw: Mapping[str, Any], query: Optional[Mapping[str, Any]] = None
    ) -> Optional["CartAddCommand"]:
        """
        Build an add command from validated ``{productId, qty?}`` data, with
        ``?qty=`` as a fallback for the quantity the way product pages link to
        the cart.
        """
        if not isinstance(raw, Mapping):
            return None
        pid = _clean_product_id(raw.get("productId"))
        if pid is None:
            return None
        qty = raw.get("qty")
        if qty is None and query is not None and query.get("qty") is not None:
            qty = _query_quantity(query.get("qty"))
        if qty is None:
            qty = DEFAULT_ADD_QUANTITY
        return CartAddCommand(product_id=pid, quantity=qty)


@dataclass
class CartQuantityCommand:
    product_id: str
    quantity: Any

    @staticmethod
    def from_raw(product_id: Any, raw: Mapping[str, Any]) -> Optional["CartQuantityCommand"]:
        if not isinstance(raw, Mapping):
            return None
        pid = _clean_product_id(product_id)
        if pid is None:
            return None
        return CartQuantityCommand(product_id=pid, quantity=raw.get("qty"))
