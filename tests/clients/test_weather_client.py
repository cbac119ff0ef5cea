"""
WeatherApiClient tests.

Each call hits a MockTransport "weather" host; we check the request the
client builds and the typed model it returns.
"""

import json

import httpx
import pytest

from clients import BackendClientManager, HttpError, WeatherApiClient
from clients.weather import WeatherAlert, WeatherResponse
from conftest import healthy, make_backends, route_by_host


WEATHER_PAYLOAD = {
    "location": {"city": "Oslo", "country": "NO", "coordinates": [59.91, 10.75]},
    "current": {
        "temperature": 4.5,
        "humidity": 81,
        "pressure": 1008,
        "wind_speed": 3.2,
        "conditions": "cloudy",
    },
    "forecast": [
        {"date": "2024-01-02", "high": 6, "low": 1, "conditions": "rain", "precipitation_chance": 70},
    ],
    "last_updated": "2024-01-01T12:00:00Z",
}


def make_weather_client(handler):
    seen = []

    def recording(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    manager = BackendClientManager(make_backends(), transport=route_by_host({"weather": recording}))
    manager.initialize()
    return WeatherApiClient(manager), seen


class TestWeatherApiClient:

    @pytest.mark.asyncio
    async def test_current_weather(self):
        client, seen = make_weather_client(lambda r: httpx.Response(200, json=WEATHER_PAYLOAD))

        weather = await client.get_current_weather("Oslo")

        assert isinstance(weather, WeatherResponse)
        assert weather.location.city == "Oslo"
        assert weather.location.coordinates == (59.91, 10.75)
        assert weather.current.humidity == 81
        assert weather.forecast[0].precipitation_chance == 70
        assert seen[0].url.path == "/weather/current"
        assert seen[0].url.params["location"] == "Oslo"

    @pytest.mark.asyncio
    async def test_forecast_passes_days(self):
        client, seen = make_weather_client(lambda r: httpx.Response(200, json=WEATHER_PAYLOAD))

        await client.get_forecast("Oslo", days=3)

        assert seen[0].url.path == "/weather/forecast"
        assert seen[0].url.params["days"] == "3"

    @pytest.mark.asyncio
    async def test_alerts(self):
        alerts = [{
            "id": "a1",
            "type": "wind",
            "severity": "high",
            "title": "Gale warning",
            "description": "Gusts up to 25 m/s",
            "start_time": "2024-01-01T18:00:00Z",
        }]
        client, _ = make_weather_client(lambda r: httpx.Response(200, json=alerts))

        result = await client.get_weather_alerts("Bergen")

        assert len(result) == 1
        assert isinstance(result[0], WeatherAlert)
        assert result[0].severity == "high"

    @pytest.mark.asyncio
    async def test_search_failure_yields_empty_list(self):
        client, _ = make_weather_client(lambda r: httpx.Response(404))

        assert await client.search_locations("Osl") == []

    @pytest.mark.asyncio
    async def test_other_failures_propagate(self):
        client, _ = make_weather_client(lambda r: httpx.Response(500))

        with pytest.raises(HttpError):
            await client.get_weather_stats("Oslo")

    @pytest.mark.asyncio
    async def test_batch_posts_locations(self):
        client, seen = make_weather_client(
            lambda r: httpx.Response(200, json=[WEATHER_PAYLOAD, WEATHER_PAYLOAD])
        )

        result = await client.get_batch_weather(["Oslo", "Bergen"])

        assert len(result) == 2
        assert seen[0].method == "POST"
        assert json.loads(seen[0].content) == {"locations": ["Oslo", "Bergen"]}

    @pytest.mark.asyncio
    async def test_availability_follows_health(self):
        client, _ = make_weather_client(healthy)

        assert client.is_available() is False
        await client.health_check()
        assert client.is_available() is True
