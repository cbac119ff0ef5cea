from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Literal, Optional

from pydantic import BaseModel, ConfigDict

HealthStatusValue = Literal["healthy", "unhealthy"]

DEFAULT_TIMEOUT_MS = 30000
DEFAULT_RETRY_COUNT = 3
DEFAULT_HEALTH_ENDPOINT = "/health"


@dataclass(frozen=True)
class BackendConfig:
    """Connection settings for one remote backend service."""

    name: str
    url: str
    version: str
    enabled: bool
    timeout: int = DEFAULT_TIMEOUT_MS  # milliseconds
    retry_count: int = DEFAULT_RETRY_COUNT
    health_endpoint: str = DEFAULT_HEALTH_ENDPOINT
    features: FrozenSet[str] = frozenset()


@dataclass
class ApiResponse:
    data: Any
    status: int
    message: Optional[str] = None
    timestamp: Optional[str] = None


class HealthCheckResponse(BaseModel):
    """Payload every backend returns from its health endpoint."""

    model_config = ConfigDict(extra="allow")

    status: HealthStatusValue
    timestamp: str
    version: Optional[str] = None
    uptime: Optional[float] = None
    services: Optional[Dict[str, Any]] = None


class ApiError(Exception):
    """
    Normalized backend failure.

    Callers of the client manager only ever see this type (or a subclass),
    never the underlying httpx exception.
    """

    default_code: Optional[str] = None
    default_status: int = 500

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status = status if status is not None else self.default_status
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(message)

    @property
    def backend(self) -> Optional[str]:
        return self.details.get("backend")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "status": self.status,
            "code": self.code,
            "details": self.details,
        }


class BackendNotConfiguredError(ApiError):
    """Backend key is unknown or its backend is disabled."""

    default_code = "NOT_CONFIGURED"
    default_status = 404


class BackendConnectionError(ApiError):
    default_code = "CONNECTION_REFUSED"
    default_status = 503


class BackendTimeoutError(ApiError):
    default_code = "TIMEOUT"
    default_status = 504


class UnauthorizedError(ApiError):
    """HTTP 401. The stored token for the backend has been evicted."""

    default_code = "UNAUTHORIZED"
    default_status = 401


class HttpError(ApiError):
    default_code = "HTTP_ERROR"
