"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from typing import Callable, Dict

import httpx
import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from clients import BackendConfig  # noqa: E402


HEALTHY_PAYLOAD = {
    "status": "healthy",
    "timestamp": "2024-01-01T00:00:00Z",
    "version": "1.2.3",
}


def make_backends() -> Dict[str, BackendConfig]:
    """Two enabled backends on fake hosts, one disabled."""
    return {
        "weather": BackendConfig(
            name="Weather-Forecasting",
            url="http://weather.test",
            version="v1",
            enabled=True,
            timeout=1000,
            features=frozenset({"forecasting", "alerts"}),
        ),
        "finance": BackendConfig(
            name="Financial-Analysis",
            url="http://finance.test",
            version="v2",
            enabled=True,
            timeout=1000,
        ),
        "ml": BackendConfig(
            name="ML-Processing",
            url="http://ml.test",
            version="v1",
            enabled=False,
        ),
    }


def route_by_host(routes: Dict[str, Callable[[httpx.Request], httpx.Response]]):
    """
    Build an httpx.MockTransport dispatching on request host.

    Hosts are the first label, e.g. "weather" for http://weather.test.
    Unrouted hosts are refused.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        host = request.url.host.split(".")[0]
        route = routes.get(host)
        if route is None:
            raise httpx.ConnectError("Connection refused", request=request)
        return route(request)

    return httpx.MockTransport(handler)


def healthy(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json=HEALTHY_PAYLOAD)


@pytest.fixture
def backends() -> Dict[str, BackendConfig]:
    return make_backends()
