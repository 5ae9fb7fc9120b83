from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from apps.common import get_logger
from apps.common import i18n
from apps.common.http import RemoteServiceError, ServiceUnavailableError

from .protocols import AuthClientProtocol

logger = get_logger(__name__).bind(component="auth", layer="service")

ErrorTuple = Tuple[str, str, Optional[Dict[str, Any]]]


class AuthService:
    """
    Login and registration proxied to the external auth service.

    Returns ``(user_info, None)`` on success or ``(None, (code, message,
    details))`` on failure; the caller stores ``user_info`` as the session
    marker.
    """

    def __init__(self, client: AuthClientProtocol):
        self.client = client
        self.logger = logger.bind(service="AuthService")

    def login(
        self, email: str, password: str
    ) -> Tuple[Optional[Dict[str, Any]], Optional[ErrorTuple]]:
        email = email.strip()
        self.logger.debug("Login requested", email=email)
        try:
            payload = self.client.login(email, password)
        except ServiceUnavailableError as exc:
            return None, self._unavailable("login", exc)
        except RemoteServiceError as exc:
            self.logger.info(
                "Login rejected by auth service", email=email, status=exc.status_code
            )
            return None, (
                "UNAUTHORIZED",
                exc.remote_message or str(i18n.LOGIN_FAILED),
                None,
            )
        user_info = self._as_user_info(payload, fallback_email=email)
        self.logger.info("Login succeeded", email=email)
        return user_info, None

    def register(
        self, name: str, email: str, password: str, confirm_password: str
    ) -> Tuple[Optional[Dict[str, Any]], Optional[ErrorTuple]]:
        name = name.strip()
        email = email.strip()
        if password != confirm_password:
            self.logger.info("Registration rejected: passwords differ", email=email)
            return None, (
                "VALIDATION_ERROR",
                str(i18n.PASSWORDS_DO_NOT_MATCH),
                {"confirmPassword": str(i18n.PASSWORDS_DO_NOT_MATCH)},
            )
        self.logger.debug("Registration requested", email=email)
        try:
            payload = self.client.register(name, email, password)
        except ServiceUnavailableError as exc:
            return None, self._unavailable("register", exc)
        except RemoteServiceError as exc:
            self.logger.info(
                "Registration rejected by auth service",
                email=email,
                status=exc.status_code,
            )
            return None, (
                "VALIDATION_ERROR",
                exc.remote_message or str(i18n.REGISTRATION_FAILED),
                None,
            )
        user_info = self._as_user_info(payload, fallback_email=email, fallback_name=name)
        self.logger.info("Registration succeeded", email=email)
        return user_info, None

    def _unavailable(self, operation: str, exc: RemoteServiceError) -> ErrorTuple:
        self.logger.warning(
            "Auth service unavailable", operation=operation, error=exc.message
        )
        return ("SERVICE_UNAVAILABLE", str(i18n.AUTH_SERVICE_UNAVAILABLE), None)

    @staticmethod
    def _as_user_info(
        payload: Any,
        *,
        fallback_email: str,
        fallback_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        info: Dict[str, Any] = dict(payload) if isinstance(payload, dict) else {}
        info.setdefault("email", fallback_email)
        if fallback_name:
            info.setdefault("name", fallback_name)
        return info
