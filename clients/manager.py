"""
Backend Client Manager: one async HTTP client per enabled backend.

Every enabled BackendConfig gets exactly one httpx.AsyncClient bound to its
base URL, timeout and version header. Disabled or unknown backend keys are
unaddressable: every operation on them raises BackendNotConfiguredError.

Request pipeline (httpx event hooks, applied to every call):
  request   → attach "Authorization: Bearer <token>" if one is stored
  response  → on 401, evict the stored token and record an auth failure

All transport and HTTP failures leave this module as ApiError (or a subclass):
    {message, status, code, details: {backend, url, method, original_error}}

Invariants:
- Health state is written only by the health checks (and cleared by refresh)
- health_check_all() never raises; one backend never affects another
- No automatic retries; each call is bounded by the backend's timeout
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Mapping, Optional, Set, Union

import httpx
from pydantic import ValidationError

from .token_store import InMemoryKeyValueStore, KeyValueStore
from .types import (
    ApiError,
    ApiResponse,
    BackendConfig,
    BackendConnectionError,
    BackendNotConfiguredError,
    BackendTimeoutError,
    DEFAULT_HEALTH_ENDPOINT,
    DEFAULT_TIMEOUT_MS,
    HealthCheckResponse,
    HttpError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

CLIENT_ID = "ui-workspace"
TOKEN_KEY_PREFIX = "auth_token_"

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _decode_body(response: httpx.Response) -> Any:
    """JSON body if there is one, raw text otherwise, None when empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _message_from(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    for field in ("message", "detail", "error"):
        value = payload.get(field)
        if isinstance(value, str) and value:
            return value
    return None


class BackendClientManager:
    """
    Owns and mediates all outbound calls to enabled backends.

    Usage:
        manager = BackendClientManager(config.backends, token_store)
        manager.initialize()
        health = await manager.health_check_all()
        response = await manager.get("weather", "/weather/current", params={...})
    """

    def __init__(
        self,
        backends: Mapping[str, BackendConfig],
        token_store: Optional[KeyValueStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            backends: Backend registry keyed by backend key.
            token_store: Persistence for bearer tokens (defaults to in-memory).
            transport: Optional httpx transport shared by all clients
                       (unit-test hook, e.g. httpx.MockTransport).
        """
        self._backends: Dict[str, BackendConfig] = dict(backends)
        self.token_store = token_store or InMemoryKeyValueStore()
        self._transport = transport
        self._clients: Dict[str, httpx.AsyncClient] = {}
        self._health_status: Dict[str, bool] = {}
        self._auth_failures: Set[str] = set()

    # ── Lifecycle ─────────────────────────────────────────────

    def initialize(self) -> None:
        """Create one client per enabled backend. Disabled backends get none."""
        for backend_key, config in self._backends.items():
            if config.enabled and backend_key not in self._clients:
                self._clients[backend_key] = self._create_client(backend_key, config)

        logger.info(
            f"Initialized {len(self._clients)} backend client(s): "
            f"{', '.join(self._clients) or 'none'}"
        )

    def _create_client(self, backend_key: str, config: BackendConfig) -> httpx.AsyncClient:
        tag = backend_key.upper()

        async def inject_token(request: httpx.Request) -> None:
            token = self._get_auth_token(backend_key)
            if token:
                request.headers["Authorization"] = f"Bearer {token}"
            logger.debug(f"[{tag}] → {request.method} {request.url}")

        async def inspect_response(response: httpx.Response) -> None:
            logger.debug(
                f"[{tag}] ← {response.status_code} "
                f"{response.request.method} {response.request.url}"
            )
            if response.status_code == 401:
                self._handle_auth_error(backend_key)

        timeout_ms = config.timeout or DEFAULT_TIMEOUT_MS

        return httpx.AsyncClient(
            base_url=config.url,
            timeout=timeout_ms / 1000,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                "X-API-Version": config.version,
                "X-Client": CLIENT_ID,
            },
            event_hooks={"request": [inject_token], "response": [inspect_response]},
            transport=self._transport,
        )

    async def refresh_clients(self, backends: Optional[Mapping[str, BackendConfig]] = None) -> None:
        """
        Discard all clients and health state, then re-initialize.

        Args:
            backends: Replacement registry; the current one is reused if None.
        """
        await self.close()
        self._health_status.clear()
        if backends is not None:
            self._backends = dict(backends)
        self.initialize()

    async def close(self) -> None:
        """Close every live client."""
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.aclose()

    # ── Introspection ─────────────────────────────────────────

    def get_client(self, backend_key: str) -> Optional[httpx.AsyncClient]:
        return self._clients.get(backend_key)

    def get_backend_config(self, backend_key: str) -> Optional[BackendConfig]:
        return self._backends.get(backend_key)

    def get_enabled_backend_keys(self) -> List[str]:
        return [key for key, config in self._backends.items() if config.enabled]

    # ── Requests ──────────────────────────────────────────────

    async def request(
        self,
        backend_key: str,
        method: HttpMethod,
        endpoint: str,
        data: Any = None,
        **options: Any,
    ) -> ApiResponse:
        """
        Send one request to a backend.

        Args:
            backend_key: Registry key of the target backend.
            method: HTTP verb.
            endpoint: Path relative to the backend base URL.
            data: JSON-serializable request body (omitted when None).
            **options: Passed to httpx (params, headers, timeout, ...).

        Returns:
            ApiResponse with decoded body, status, reason phrase and timestamp.

        Raises:
            BackendNotConfiguredError: Key is unknown or disabled.
            ApiError: Any other failure, normalized.
        """
        client = self.get_client(backend_key)
        if client is None:
            raise self._not_configured(backend_key, method, endpoint)

        try:
            response = await client.request(method.upper(), endpoint, json=data, **options)
            response.raise_for_status()
        except httpx.HTTPError as e:
            error = self._normalize_error(e, backend_key, method, endpoint)
            logger.warning(
                f"[{backend_key.upper()}] {method.upper()} {endpoint} failed: "
                f"{error.status} {error.code} {error.message}"
            )
            raise error from e

        return ApiResponse(
            data=_decode_body(response),
            status=response.status_code,
            message=response.reason_phrase,
            timestamp=_now(),
        )

    async def get(self, backend_key: str, endpoint: str, **options: Any) -> ApiResponse:
        return await self.request(backend_key, "GET", endpoint, **options)

    async def post(self, backend_key: str, endpoint: str, data: Any = None, **options: Any) -> ApiResponse:
        return await self.request(backend_key, "POST", endpoint, data, **options)

    async def put(self, backend_key: str, endpoint: str, data: Any = None, **options: Any) -> ApiResponse:
        return await self.request(backend_key, "PUT", endpoint, data, **options)

    async def patch(self, backend_key: str, endpoint: str, data: Any = None, **options: Any) -> ApiResponse:
        return await self.request(backend_key, "PATCH", endpoint, data, **options)

    async def delete(self, backend_key: str, endpoint: str, **options: Any) -> ApiResponse:
        return await self.request(backend_key, "DELETE", endpoint, **options)

    # ── Health ────────────────────────────────────────────────

    async def health_check(self, backend_key: str) -> HealthCheckResponse:
        """
        GET the backend's health endpoint and record the outcome.

        Success marks the backend healthy and returns the parsed payload.
        Any failure marks it unhealthy and re-raises the normalized error.
        """
        if backend_key not in self._clients:
            raise self._not_configured(backend_key, "GET", DEFAULT_HEALTH_ENDPOINT)

        endpoint = self._backends[backend_key].health_endpoint or DEFAULT_HEALTH_ENDPOINT

        try:
            response = await self.request(backend_key, "GET", endpoint)
            health = HealthCheckResponse.model_validate(response.data)
        except ApiError:
            self._health_status[backend_key] = False
            raise
        except ValidationError as e:
            self._health_status[backend_key] = False
            raise ApiError(
                f"Backend '{backend_key}' returned a malformed health payload",
                status=502,
                code="INVALID_RESPONSE",
                details={
                    "backend": backend_key,
                    "url": endpoint,
                    "method": "get",
                    "original_error": str(e),
                },
            ) from e

        self._health_status[backend_key] = True
        return health

    async def health_check_all(self) -> Dict[str, Union[HealthCheckResponse, ApiError]]:
        """
        Check every live backend concurrently.

        Never raises. Each key maps to its HealthCheckResponse or ApiError;
        keys follow registry order.
        """
        backend_keys = list(self._clients)
        outcomes = await asyncio.gather(
            *(self.health_check(key) for key in backend_keys),
            return_exceptions=True,
        )

        results: Dict[str, Union[HealthCheckResponse, ApiError]] = {}
        for backend_key, outcome in zip(backend_keys, outcomes):
            if isinstance(outcome, (HealthCheckResponse, ApiError)):
                results[backend_key] = outcome
                continue

            # Anything else escaped normalization
            logger.error(f"[{backend_key.upper()}] health check crashed: {outcome!r}")
            self._health_status[backend_key] = False
            results[backend_key] = ApiError(
                str(outcome) or "Health check failed",
                details={
                    "backend": backend_key,
                    "url": self._backends[backend_key].health_endpoint,
                    "method": "get",
                    "original_error": repr(outcome),
                },
            )

        healthy = sum(1 for r in results.values() if isinstance(r, HealthCheckResponse))
        logger.info(f"Health check complete: {healthy}/{len(results)} backend(s) healthy")
        return results

    def is_backend_healthy(self, backend_key: str) -> bool:
        """Last-known health; False if never checked. No network I/O."""
        return self._health_status.get(backend_key, False)

    def get_healthy_backends(self) -> List[str]:
        return [key for key, healthy in self._health_status.items() if healthy]

    # ── Authentication ────────────────────────────────────────

    def _get_auth_token(self, backend_key: str) -> Optional[str]:
        return self.token_store.get_item(f"{TOKEN_KEY_PREFIX}{backend_key}")

    def set_auth_token(self, backend_key: str, token: str) -> None:
        self.token_store.set_item(f"{TOKEN_KEY_PREFIX}{backend_key}", token)
        self._auth_failures.discard(backend_key)

    def clear_auth_token(self, backend_key: str) -> None:
        self.token_store.remove_item(f"{TOKEN_KEY_PREFIX}{backend_key}")

    def has_auth_failure(self, backend_key: str) -> bool:
        """True if the last authenticated call to this backend returned 401."""
        return backend_key in self._auth_failures

    def _handle_auth_error(self, backend_key: str) -> None:
        self.clear_auth_token(backend_key)
        self._auth_failures.add(backend_key)
        logger.warning(f"Authentication failed for backend: {backend_key}")

    # ── Error normalization ───────────────────────────────────

    def _not_configured(self, backend_key: str, method: str, endpoint: str) -> BackendNotConfiguredError:
        return BackendNotConfiguredError(
            f"Backend '{backend_key}' is not configured or enabled",
            details={
                "backend": backend_key,
                "url": endpoint,
                "method": method.lower(),
                "original_error": None,
            },
        )

    def _normalize_error(
        self, error: httpx.HTTPError, backend_key: str, method: str, endpoint: str
    ) -> ApiError:
        details: Dict[str, Any] = {
            "backend": backend_key,
            "url": endpoint,
            "method": method.lower(),
        }

        if isinstance(error, httpx.HTTPStatusError):
            response = error.response
            body = _decode_body(response)
            status = response.status_code
            error_cls = UnauthorizedError if status == 401 else HttpError
            code = body.get("code") if isinstance(body, dict) else None
            message = _message_from(body) or f"HTTP {status} {response.reason_phrase}".strip()
            details["original_error"] = body if body is not None else str(error)
            return error_cls(message, status=status, code=code, details=details)

        details["original_error"] = str(error) or type(error).__name__

        if isinstance(error, httpx.TimeoutException):
            return BackendTimeoutError(
                f"Request to backend '{backend_key}' timed out", details=details
            )

        if isinstance(error, httpx.ConnectError):
            return BackendConnectionError(
                f"Could not connect to backend '{backend_key}'", details=details
            )

        return ApiError(str(error) or "An error occurred", details=details)
