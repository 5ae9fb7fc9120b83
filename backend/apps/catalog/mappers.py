from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List

from apps.carts.dtos import ProductSnapshot

from .dtos import ProductDTO


class MalformedProductError(ValueError):
    """The product service returned a payload that does not match its contract."""


def _first(raw: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return default


def _stock_count(raw_stock: Any) -> int:
    if isinstance(raw_stock, bool):
        raise MalformedProductError(f"invalid stock count {raw_stock!r}")
    try:
        stock = Decimal(str(raw_stock).strip())
    except InvalidOperation as exc:
        raise MalformedProductError(f"invalid stock count {raw_stock!r}") from exc
    # Whole units only.
    if not stock.is_finite() or stock != stock.to_integral_value():
        raise MalformedProductError(f"invalid stock count {raw_stock!r}")
    return int(stock)


class ProductMapper:
    @staticmethod
    def from_payload(raw: Any) -> ProductDTO:
        """Map one ``{id, name, imageUrl, price, countInStock, description}`` record."""
        if not isinstance(raw, dict):
            raise MalformedProductError("product payload must be an object")
        product_id = _first(raw, "id", "_id")
        if product_id is None or isinstance(product_id, bool) or str(product_id).strip() == "":
            raise MalformedProductError("product payload has no id")
        raw_price = _first(raw, "price", default=0)
        try:
            price = Decimal(str(raw_price))
        except InvalidOperation as exc:
            raise MalformedProductError(f"invalid price {raw_price!r}") from exc
        if not price.is_finite() or price < 0:
            raise MalformedProductError(f"invalid price {raw_price!r}")
        raw_stock = _first(raw, "countInStock", "count_in_stock", "inventory", default=0)
        count_in_stock = max(_stock_count(raw_stock), 0)
        image_url = _first(raw, "imageUrl", "image_url", "image", default="")
        if not image_url:
            images = raw.get("images")
            if isinstance(images, list) and images:
                image_url = images[0]
        return ProductDTO(
            id=str(product_id).strip(),
            name=str(_first(raw, "name", "title", default="")),
            description=str(_first(raw, "description", default="")),
            price=price,
            image_url=str(image_url or ""),
            count_in_stock=count_in_stock,
        )

    @staticmethod
    def many_from_payload(raw: Any) -> List[ProductDTO]:
        """Accept either a bare list or the ``{"products": [...]}`` envelope."""
        if isinstance(raw, dict):
            raw = raw.get("products")
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise MalformedProductError("product list payload must be a list")
        return [ProductMapper.from_payload(r) for r in raw]

    @staticmethod
    def to_snapshot(product: ProductDTO) -> ProductSnapshot:
        return ProductSnapshot(
            product_id=product.id,
            name=product.name,
            image=product.image_url,
            price=product.price,
            count_in_stock=product.count_in_stock,
        )
