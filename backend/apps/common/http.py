from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter

from .logger import get_logger

logger = get_logger(__name__).bind(component="common", layer="http")


class RemoteServiceError(Exception):
    """Base error for calls to an external storefront service."""

    def __init__(
        self,
        message: str,
        *,
        service: str,
        status_code: int = 0,
        payload: Optional[Any] = None,
    ):
        super().__init__(message)
        self.message = message
        self.service = service
        self.status_code = status_code
        self.payload = payload

    @property
    def remote_message(self) -> Optional[str]:
        if isinstance(self.payload, dict):
            for key in ("message", "error", "detail"):
                value = self.payload.get(key)
                if isinstance(value, str) and value.strip():
                    return value.strip()
        return None


class ServiceUnavailableError(RemoteServiceError):
    """Network failure, timeout or 5xx from the remote service."""


class RemoteNotFoundError(RemoteServiceError):
    """The remote service answered 404."""


class RemoteRequestError(RemoteServiceError):
    """The remote service rejected the request (4xx other than 404)."""


@dataclass(frozen=True)
class ServiceConfig:
    name: str
    base_url: str
    connect_timeout_seconds: float = 2.0
    read_timeout_seconds: float = 5.0
    max_connections: int = 10

    @classmethod
    def from_settings(cls, name: str, url_setting: str) -> "ServiceConfig":
        from django.conf import settings

        return cls(
            name=name,
            base_url=getattr(settings, url_setting),
            connect_timeout_seconds=float(
                getattr(settings, "SERVICE_CONNECT_TIMEOUT", 2.0)
            ),
            read_timeout_seconds=float(getattr(settings, "SERVICE_READ_TIMEOUT", 5.0)),
        )


class ServiceClient:
    """
    JSON-over-HTTP client for one external service.

    Every call is a single attempt: no retries and no backoff. Transport
    failures and 5xx responses surface as ``ServiceUnavailableError`` so callers
    can decide how to degrade.
    """

    def __init__(self, config: ServiceConfig, session: Optional[requests.Session] = None):
        self.config = config
        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=config.max_connections,
                pool_maxsize=config.max_connections,
            )
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self.session = session
        self.logger = logger.bind(service=config.name)

    def _build_url(self, path: str) -> str:
        base = self.config.base_url.rstrip("/") + "/"
        return urljoin(base, path.lstrip("/"))

    def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        base_url: Optional[str] = None,
    ) -> Any:
        normalized_method = method.upper()
        request_headers = {"Accept": "application/json"}
        if headers:
            request_headers.update(headers)
        url = (
            urljoin(base_url.rstrip("/") + "/", path.lstrip("/"))
            if base_url
            else self._build_url(path)
        )
        started = time.monotonic()
        try:
            response = self.session.request(
                method=normalized_method,
                url=url,
                headers=request_headers,
                json=json_body,
                params=params,
                timeout=(
                    self.config.connect_timeout_seconds,
                    self.config.read_timeout_seconds,
                ),
            )
        except requests.RequestException as exc:
            self.logger.warning(
                "Remote call failed",
                method=normalized_method,
                url=url,
                error=type(exc).__name__,
            )
            raise ServiceUnavailableError(
                str(exc), service=self.config.name
            ) from exc

        duration_ms = int((time.monotonic() - started) * 1000)
        self.logger.debug(
            "Remote call completed",
            method=normalized_method,
            url=url,
            status=response.status_code,
            duration_ms=duration_ms,
        )
        if response.ok:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as exc:
                raise ServiceUnavailableError(
                    "Remote service returned invalid JSON",
                    service=self.config.name,
                    status_code=response.status_code,
                ) from exc

        payload = self._error_payload(response)
        message = f"{self.config.name} responded with HTTP {response.status_code}"
        if response.status_code == 404:
            raise RemoteNotFoundError(
                message, service=self.config.name, status_code=404, payload=payload
            )
        if response.status_code >= 500:
            raise ServiceUnavailableError(
                message,
                service=self.config.name,
                status_code=response.status_code,
                payload=payload,
            )
        raise RemoteRequestError(
            message,
            service=self.config.name,
            status_code=response.status_code,
            payload=payload,
        )

    def get(self, path: str, **kwargs: Any) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, json_body: Optional[Dict[str, Any]] = None, **kwargs: Any) -> Any:
        return self.request("POST", path, json_body=json_body, **kwargs)

    def ping(self) -> Dict[str, Any]:
        """Probe the service root ``/health`` endpoint for readiness checks."""
        root = self._service_root()
        started = time.monotonic()
        try:
            self.request("GET", "health", base_url=root)
        except RemoteServiceError as exc:
            return {"status": "fail", "error": exc.message}
        latency = round((time.monotonic() - started) * 1000, 2)
        return {"status": "ok", "latency_ms": latency}

    def _service_root(self) -> str:
        # Services mount their API under /api/v1 but expose /health at the root.
        base = self.config.base_url.rstrip("/")
        marker = base.find("/api/")
        return base[:marker] if marker != -1 else base

    @staticmethod
    def _error_payload(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return {"message": response.text} if response.text else None
