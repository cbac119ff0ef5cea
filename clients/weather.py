"""
Weather-Forecasting backend client.

Thin, typed wrapper over BackendClientManager for the "weather" backend.
Payloads are validated with Pydantic; transport failures surface as ApiError
exactly as they do from the manager.
"""

import logging
from typing import Any, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .manager import BackendClientManager
from .types import ApiError, HealthCheckResponse

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────
# SCHEMAS
# ──────────────────────────────────────────────────────────────


class WeatherLocation(BaseModel):
    model_config = ConfigDict(extra="allow")

    city: str
    country: str
    coordinates: Tuple[float, float]  # (latitude, longitude)
    region: Optional[str] = None
    timezone: Optional[str] = None


class CurrentWeather(BaseModel):
    model_config = ConfigDict(extra="allow")

    temperature: float  # Celsius
    humidity: float  # %
    pressure: float  # hPa
    wind_speed: float  # m/s
    wind_direction: Optional[float] = None
    conditions: str
    description: Optional[str] = None
    icon: Optional[str] = None
    visibility: Optional[float] = None  # km
    uv_index: Optional[float] = None
    feels_like: Optional[float] = None


class WeatherForecast(BaseModel):
    model_config = ConfigDict(extra="allow")

    date: str
    high: float
    low: float
    conditions: str
    precipitation_chance: float
    precipitation_mm: Optional[float] = None
    humidity: Optional[float] = None
    wind_speed: Optional[float] = None
    icon: Optional[str] = None
    description: Optional[str] = None


class WeatherResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    location: WeatherLocation
    current: CurrentWeather
    forecast: List[WeatherForecast] = Field(default_factory=list)
    last_updated: str
    source: Optional[str] = None
    model_version: Optional[str] = None


class WeatherAlert(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    type: str
    severity: Literal["low", "medium", "high", "critical"]
    title: str
    description: str
    start_time: str
    end_time: Optional[str] = None
    area: Optional[str] = None


class WeatherStats(BaseModel):
    model_config = ConfigDict(extra="allow")

    location: str
    period: str
    avg_temperature: float
    min_temperature: float
    max_temperature: float
    avg_humidity: float
    total_precipitation: float
    dominant_conditions: List[str] = Field(default_factory=list)


# ──────────────────────────────────────────────────────────────
# CLIENT
# ──────────────────────────────────────────────────────────────


class WeatherApiClient:
    """
    Module-specific client for the Weather-Forecasting backend.

    Usage:
        weather = WeatherApiClient(manager)
        if weather.is_available():
            current = await weather.get_current_weather("Berlin")
    """

    backend_key = "weather"

    def __init__(self, manager: BackendClientManager):
        self.manager = manager

    def is_available(self) -> bool:
        """Gate for network-dependent queries: last-known health of the backend."""
        return self.manager.is_backend_healthy(self.backend_key)

    async def health_check(self) -> HealthCheckResponse:
        return await self.manager.health_check(self.backend_key)

    async def get_current_weather(self, location: str) -> WeatherResponse:
        response = await self.manager.get(
            self.backend_key, "/weather/current", params={"location": location}
        )
        return WeatherResponse.model_validate(response.data)

    async def get_forecast(self, location: str, days: int = 7) -> WeatherResponse:
        """Forecast for 1-7 days."""
        response = await self.manager.get(
            self.backend_key, "/weather/forecast", params={"location": location, "days": days}
        )
        return WeatherResponse.model_validate(response.data)

    async def get_historical_weather(self, location: str, date: str) -> WeatherResponse:
        response = await self.manager.get(
            self.backend_key, "/weather/history", params={"location": location, "date": date}
        )
        return WeatherResponse.model_validate(response.data)

    async def get_weather_alerts(self, location: str) -> List[WeatherAlert]:
        response = await self.manager.get(
            self.backend_key, "/weather/alerts", params={"location": location}
        )
        return [WeatherAlert.model_validate(item) for item in response.data or []]

    async def search_locations(self, query: str, limit: int = 10) -> List[WeatherLocation]:
        """
        Search locations by name.

        Not every backend implements search, so failures yield an empty list.
        """
        try:
            response = await self.manager.get(
                self.backend_key, "/weather/search", params={"q": query, "limit": limit}
            )
        except ApiError as e:
            logger.warning(f"Location search not available: {e.message}")
            return []
        return [WeatherLocation.model_validate(item) for item in response.data or []]

    async def get_weather_stats(self, location: str, period: str = "30d") -> WeatherStats:
        response = await self.manager.get(
            self.backend_key, "/weather/stats", params={"location": location, "period": period}
        )
        return WeatherStats.model_validate(response.data)

    async def run_calculation(self, data: Any) -> Any:
        """Run a server-side calculation; the body is passed through untouched."""
        response = await self.manager.post(self.backend_key, "/weather/calculate", data)
        return response.data

    async def get_batch_weather(self, locations: List[str]) -> List[WeatherResponse]:
        response = await self.manager.post(
            self.backend_key, "/weather/batch", {"locations": locations}
        )
        return [WeatherResponse.model_validate(item) for item in response.data or []]
