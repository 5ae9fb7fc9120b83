from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import quote

from apps.common.http import ServiceClient, ServiceConfig


class ProductServiceClient(ServiceClient):
    """Read-only client for the external product service."""

    @classmethod
    def from_settings(cls) -> "ProductServiceClient":
        return cls(ServiceConfig.from_settings("product-service", "PRODUCT_SERVICE_URL"))

    @staticmethod
    def _language_headers(language: Optional[str]) -> Optional[Dict[str, str]]:
        return {"Accept-Language": language} if language else None

    def list_products(self, *, language: Optional[str] = None) -> Any:
        return self.get("products", headers=self._language_headers(language))

    def get_product(self, product_id: str, *, language: Optional[str] = None) -> Any:
        path = f"products/{quote(str(product_id), safe='')}"
        return self.get(path, headers=self._language_headers(language))
