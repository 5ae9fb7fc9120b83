from __future__ import annotations

from typing import Any

from apps.common.http import ServiceClient, ServiceConfig


class AuthServiceClient(ServiceClient):
    """Client for the external auth service's login and registration endpoints."""

    @classmethod
    def from_settings(cls) -> "AuthServiceClient":
        return cls(ServiceConfig.from_settings("auth-service", "AUTH_SERVICE_URL"))

    def login(self, email: str, password: str) -> Any:
        return self.post("auth/login", {"email": email, "password": password})

    def register(self, name: str, email: str, password: str) -> Any:
        return self.post(
            "auth/register", {"name": name, "email": email, "password": password}
        )
