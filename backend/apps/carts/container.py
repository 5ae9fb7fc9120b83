from __future__ import annotations

from typing import Optional

from django.conf import settings

from apps.catalog.container import build_product_service

from .protocols import ProductLookupProtocol
from .reconciler import CartReconciler
from .services import CartService
from .storage import DEFAULT_CART_STORAGE_KEY, SessionCartStorage


def _cookie_budget() -> Optional[int]:
    # Only the signed-cookie engine ships the session to the browser.
    if getattr(settings, "SESSION_ENGINE", "").endswith(".signed_cookies"):
        return getattr(settings, "SESSION_COOKIE_MAX_BYTES", 4000)
    return None


def build_cart_reconciler(session) -> CartReconciler:
    key = getattr(settings, "CART_STORAGE_KEY", DEFAULT_CART_STORAGE_KEY)
    storage = SessionCartStorage(session, key=key, max_bytes=_cookie_budget())
    return CartReconciler(storage)


def build_cart_service(
    session, *, products: Optional[ProductLookupProtocol] = None
) -> CartService:
    return CartService(
        reconciler=build_cart_reconciler(session),
        products=products or build_product_service(),
    )
