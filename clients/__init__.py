"""
Backend client layer.

This package owns every outbound call from the workspace to its backends,
allowing UI-facing code to remain agnostic of transport details.

Components:
- BackendClientManager: one httpx.AsyncClient per enabled backend
- KeyValueStore: token persistence boundary (in-memory, SQLite)
- WeatherApiClient: typed client for the Weather-Forecasting backend

Example usage:
    from clients import BackendClientManager

    manager = BackendClientManager(config.backends)
    manager.initialize()
    results = await manager.health_check_all()
"""

from .types import (
    ApiError,
    ApiResponse,
    BackendConfig,
    BackendConnectionError,
    BackendNotConfiguredError,
    BackendTimeoutError,
    HealthCheckResponse,
    HttpError,
    UnauthorizedError,
)
from .token_store import KeyValueStore, InMemoryKeyValueStore, SQLiteKeyValueStore
from .manager import BackendClientManager
from .weather import WeatherApiClient

__all__ = [
    "ApiError",
    "ApiResponse",
    "BackendConfig",
    "BackendConnectionError",
    "BackendNotConfiguredError",
    "BackendTimeoutError",
    "HealthCheckResponse",
    "HttpError",
    "UnauthorizedError",
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "SQLiteKeyValueStore",
    "BackendClientManager",
    "WeatherApiClient",
]
