from __future__ import annotations

from decimal import Decimal
from typing import Optional

from apps.common import get_logger
from apps.common.http import RemoteNotFoundError, RemoteServiceError
from apps.common.i18n import normalize_language_code

from .dtos import (
    LOOKUP_DEGRADED,
    LOOKUP_NOT_FOUND,
    LOOKUP_OK,
    ProductDTO,
    ProductListing,
    ProductLookup,
)
from .mappers import MalformedProductError, ProductMapper
from .protocols import CacheBackendProtocol, ProductClientProtocol

logger = get_logger(__name__).bind(component="catalog", layer="service")

PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/300"


def placeholder_product(product_id: str) -> ProductDTO:
    """Development stand-in shown when the product service is unreachable."""
    return ProductDTO(
        id=str(product_id),
        name="Sample product",
        description="Placeholder shown while the product service is unavailable.",
        price=Decimal("199"),
        image_url=PLACEHOLDER_IMAGE_URL,
        count_in_stock=5,
        placeholder=True,
    )


class ProductService:
    """
    Catalog reads proxied to the external product service.

    Remote failures never propagate: they come back as a degraded result so
    callers can show an offline state. Placeholder data is attached to a
    degraded detail lookup only when ``placeholder_fallback`` is enabled, and
    it is always flagged as such.
    """

    def __init__(
        self,
        client: ProductClientProtocol,
        cache_backend: CacheBackendProtocol,
        *,
        disable_cache: bool = False,
        cache_timeout: Optional[int] = None,
        placeholder_fallback: bool = False,
    ):
        self.client = client
        self.cache = cache_backend
        self.disable_cache = disable_cache
        self.cache_timeout = cache_timeout
        self.placeholder_fallback = placeholder_fallback
        self.logger = logger.bind(service="ProductService")
        self._cache_prefix = "products:list"

    def _cache_key(self, language: str) -> str:
        return f"{self._cache_prefix}:lang-{language}"

    def list_products(self, *, language: Optional[str] = None) -> ProductListing:
        language = normalize_language_code(language)
        self.logger.debug(
            "Listing products",
            cache_enabled=not self.disable_cache,
            language=language,
        )
        key = None
        if not self.disable_cache:
            key = self._cache_key(language)
            cached = self.cache.get(key)
            if cached is not None:
                self.logger.debug("Product list cache hit", cache_key=key)
                return ProductListing(products=list(cached))
            self.logger.debug("Product list cache miss", cache_key=key)
        try:
            raw = self.client.list_products(language=language)
            products = ProductMapper.many_from_payload(raw)
        except (RemoteServiceError, MalformedProductError) as exc:
            self.logger.warning(
                "Product listing degraded",
                error=str(exc),
                exception=exc.__class__.__name__,
            )
            return ProductListing(products=[], degraded=True, error=str(exc))
        if key is not None:
            self.cache.set(key, products, timeout=self.cache_timeout)
        return ProductListing(products=products)

    def get_product(
        self, product_id: str, *, language: Optional[str] = None
    ) -> ProductLookup:
        product_id = str(product_id)
        self.logger.debug("Fetching product", product_id=product_id)
        try:
            raw = self.client.get_product(
                product_id, language=normalize_language_code(language)
            )
            product = ProductMapper.from_payload(raw)
        except RemoteNotFoundError:
            self.logger.info("Product not found", product_id=product_id)
            return ProductLookup(status=LOOKUP_NOT_FOUND)
        except (RemoteServiceError, MalformedProductError) as exc:
            self.logger.warning(
                "Product lookup degraded",
                product_id=product_id,
                error=str(exc),
                exception=exc.__class__.__name__,
            )
            fallback = placeholder_product(product_id) if self.placeholder_fallback else None
            return ProductLookup(status=LOOKUP_DEGRADED, product=fallback, error=str(exc))
        return ProductLookup(status=LOOKUP_OK, product=product)
