from __future__ import annotations

from django.conf import settings
from django.core.cache import cache

from .clients import ProductServiceClient
from .services import ProductService


def build_product_service(*, disable_cache: bool = False) -> ProductService:
    return ProductService(
        client=ProductServiceClient.from_settings(),
        cache_backend=cache,
        disable_cache=disable_cache,
        cache_timeout=getattr(settings, "CACHE_TTL", None),
        placeholder_fallback=bool(
            getattr(settings, "CATALOG_PLACEHOLDER_FALLBACK", False)
        ),
    )
