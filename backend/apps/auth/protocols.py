from __future__ import annotations

from typing import Any, Protocol


class AuthClientProtocol(Protocol):
    def login(self, email: str, password: str) -> Any:
        ...

    def register(self, name: str, email: str, password: str) -> Any:
        ...
