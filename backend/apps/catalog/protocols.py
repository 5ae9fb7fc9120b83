from typing import Any, Optional, Protocol


class ProductClientProtocol(Protocol):
    def list_products(self, *, language: Optional[str] = None) -> Any:
        ...

    def get_product(self, product_id: str, *, language: Optional[str] = None) -> Any:
        ...


class CacheBackendProtocol(Protocol):
    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any, timeout: Optional[int] = None) -> None:
        ...
