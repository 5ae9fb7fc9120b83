from __future__ import annotations

import json
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional

from .dtos import Cart, LineItem, normalize_product_id

CART_SCHEMA_VERSION = 1


class MalformedCartStateError(ValueError):
    """Persisted cart state could not be turned back into a Cart."""


def _coerce_product_id(value: Any) -> str:
    if isinstance(value, bool) or value is None:
        raise MalformedCartStateError("product reference is missing")
    if isinstance(value, (int, str)):
        text = normalize_product_id(value)
        if text:
            return text
    raise MalformedCartStateError(f"invalid product reference {value!r}")


def _coerce_int(value: Any, field_name: str, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedCartStateError(f"{field_name} must be an integer")
    if value < minimum:
        raise MalformedCartStateError(f"{field_name} must be >= {minimum}")
    return value


def _coerce_price(value: Any) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise MalformedCartStateError("price must be numeric")
    try:
        price = Decimal(str(value))
    except InvalidOperation as exc:
        raise MalformedCartStateError("price must be numeric") from exc
    if not price.is_finite() or price < 0:
        raise MalformedCartStateError("price must be a non-negative number")
    return price


class LineItemMapper:
    """Maps line items to and from the storage record layout."""

    @staticmethod
    def to_record(item: LineItem) -> Dict[str, Any]:
        return {
            "product": item.product_id,
            "name": item.name,
            "image": item.image,
            "price": str(item.price),
            "countInStock": item.count_in_stock,
            "qty": item.quantity,
        }

    @staticmethod
    def from_record(record: Any) -> LineItem:
        if not isinstance(record, dict):
            raise MalformedCartStateError("cart entry must be an object")
        name = record.get("name", "")
        image = record.get("image", "")
        if not isinstance(name, str) or not isinstance(image, str):
            raise MalformedCartStateError("name and image must be strings")
        return LineItem(
            product_id=_coerce_product_id(record.get("product")),
            name=name,
            image=image,
            price=_coerce_price(record.get("price")),
            count_in_stock=_coerce_int(record.get("countInStock"), "countInStock", 0),
            quantity=_coerce_int(record.get("qty"), "qty", 1),
        )

    def many_to_records(self, items: Iterable[LineItem]) -> List[Dict[str, Any]]:
        return [self.to_record(i) for i in items]


class CartSnapshotMapper:
    """
    Serialization contract for the persisted cart slot.

    Current layout is a versioned envelope ``{"version": 1, "items": [...]}``.
    The older unversioned layout (a bare JSON array of entries) is still read.
    Repeated entries for one product collapse onto the first position with the
    last entry's data, matching the cart's overwrite semantics.
    """

    def __init__(self, item_mapper: Optional[LineItemMapper] = None) -> None:
        self.item_mapper = item_mapper or LineItemMapper()

    def to_payload(self, cart: Cart) -> Dict[str, Any]:
        return {
            "version": CART_SCHEMA_VERSION,
            "items": self.item_mapper.many_to_records(cart.items),
        }

    def dumps(self, cart: Cart) -> str:
        return json.dumps(self.to_payload(cart), separators=(",", ":"))

    def loads(self, raw: Any) -> Cart:
        if isinstance(raw, (bytes, bytearray)):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise MalformedCartStateError("cart state is not valid UTF-8") from exc
        if not isinstance(raw, str):
            raise MalformedCartStateError("cart state must be a string")
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            raise MalformedCartStateError("cart state is not valid JSON") from exc
        return self.from_payload(payload)

    def from_payload(self, payload: Any) -> Cart:
        if isinstance(payload, list):
            records = payload
        elif isinstance(payload, dict):
            version = payload.get("version")
            if version != CART_SCHEMA_VERSION:
                raise MalformedCartStateError(
                    f"unsupported cart schema version {version!r}"
                )
            records = payload.get("items")
            if not isinstance(records, list):
                raise MalformedCartStateError("cart items must be a list")
        else:
            raise MalformedCartStateError("cart state must be an object or list")

        cart = Cart()
        for record in records:
            item = self.item_mapper.from_record(record)
            index = cart.index_of(item.product_id)
            if index == -1:
                cart.items.append(item)
            else:
                cart.items[index] = item
        return cart
