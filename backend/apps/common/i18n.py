from __future__ import annotations

from typing import Optional

from django.conf import settings
from django.utils import translation
from django.utils.translation import gettext_lazy as _

_DEFAULT_LANGUAGE = (
    (getattr(settings, "LANGUAGE_CODE", "en") or "en").split("-")[0].lower()
)
_SUPPORTED_LANGUAGES = {
    (code or "en").split("-")[0].lower()
    for code, _name in getattr(settings, "LANGUAGES", [("en", "English")])
} or {_DEFAULT_LANGUAGE}


def normalize_language_code(language_code: Optional[str]) -> str:
    """
    Normalize a language code to lowercase without region.
    Unknown languages fall back to the project default.
    """

    if not language_code:
        language_code = translation.get_language()
    if not language_code:
        return _DEFAULT_LANGUAGE
    normalized = language_code.split("-")[0].lower()
    return normalized if normalized in _SUPPORTED_LANGUAGES else _DEFAULT_LANGUAGE


# User-visible error messages, declared here so makemessages can extract them
# even though they only reach clients through error_response.
PRODUCT_NOT_FOUND = _("Product not found")
PRODUCT_SERVICE_UNAVAILABLE = _("Product service is unavailable")
CART_ITEM_NOT_FOUND = _("Product is not in the cart")
CART_EMPTY = _("Cart is empty")
CART_TOO_LARGE = _("Cart is too large to save, remove some items first")
INVALID_QUANTITY = _("Quantity must be a positive integer")
QUANTITY_OUT_OF_RANGE = _("Quantity must be between %(minimum)s and %(maximum)s")
AUTH_SERVICE_UNAVAILABLE = _("Authentication service is unavailable")
LOGIN_FAILED = _("Login failed, check your email and password")
REGISTRATION_FAILED = _("Registration failed, please try again later")
PASSWORDS_DO_NOT_MATCH = _("Passwords do not match")
SOMETHING_WENT_WRONG = _("Something went wrong")


__all__ = [
    "normalize_language_code",
    "PRODUCT_NOT_FOUND",
    "PRODUCT_SERVICE_UNAVAILABLE",
    "CART_ITEM_NOT_FOUND",
    "CART_EMPTY",
    "CART_TOO_LARGE",
    "INVALID_QUANTITY",
    "QUANTITY_OUT_OF_RANGE",
    "AUTH_SERVICE_UNAVAILABLE",
    "LOGIN_FAILED",
    "REGISTRATION_FAILED",
    "PASSWORDS_DO_NOT_MATCH",
    "SOMETHING_WENT_WRONG",
]
