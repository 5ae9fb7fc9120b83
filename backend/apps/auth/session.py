from __future__ import annotations

from typing import Any, Dict, MutableMapping, Optional

from django.utils.http import url_has_allowed_host_and_scheme

USER_INFO_KEY = "userInfo"
DEFAULT_REDIRECT = "/"


class AuthSession:
    """
    The auth session marker: the presence of ``userInfo`` in the visitor's
    session is the only signal the storefront uses for "signed in".
    """

    def __init__(self, session: MutableMapping[str, Any], key: str = USER_INFO_KEY):
        self.session = session
        self.key = key

    @property
    def is_signed_in(self) -> bool:
        return bool(self.session.get(self.key))

    @property
    def user_info(self) -> Optional[Dict[str, Any]]:
        value = self.session.get(self.key)
        return value if isinstance(value, dict) else None

    def sign_in(self, user_info: Dict[str, Any]) -> None:
        self.session[self.key] = dict(user_info)

    def sign_out(self) -> None:
        self.session.pop(self.key, None)


def resolve_redirect(target: Optional[str]) -> str:
    """
    Turn a ``?redirect=`` value into a local path.

    Bare names such as ``shipping`` become ``/shipping``; anything pointing at
    another host falls back to the storefront root.
    """
    if not target:
        return DEFAULT_REDIRECT
    target = target.strip()
    if not target:
        return DEFAULT_REDIRECT
    if "://" not in target and not target.startswith("/"):
        target = "/" + target
    if target.startswith("//") or not url_has_allowed_host_and_scheme(
        target, allowed_hosts=None
    ):
        return DEFAULT_REDIRECT
    return target
