from __future__ import annotations

from .clients import AuthServiceClient
from .services import AuthService


def build_auth_service() -> AuthService:
    return AuthService(client=AuthServiceClient.from_settings())
