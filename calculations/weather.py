"""
Weather calculation engine.

Client-side complement to the Weather-Forecasting backend. Every function is
pure and deterministic; units are Celsius, %, hPa and m/s unless noted.

"Feels-like" refinements (heat index, wind chill) outside their physical
validity range return the input temperature unchanged with a note instead
of an error.
"""

import logging
import math
import time
from typing import Any, Callable, Dict, List

from .base import (
    CalculationInput,
    CalculationMetadata,
    CalculationResult,
    ModuleCalculations,
    utc_timestamp,
)
from .shared import clamp, is_valid_number, mean, round_half_up

logger = logging.getLogger(__name__)

TEMPERATURE_UNITS = ("celsius", "fahrenheit", "kelvin")

# Magnus formula coefficients
MAGNUS_A = 17.27
MAGNUS_B = 237.7


def _is_humidity(value: Any) -> bool:
    return is_valid_number(value) and 0 <= value <= 100


def _has_numbers(data: Dict[str, Any], *fields: str) -> bool:
    return all(is_valid_number(data.get(f)) for f in fields)


# ──────────────────────────────────────────────────────────────
# Formulas
# ──────────────────────────────────────────────────────────────


def convert_temperature(temperature: float, from_unit: str, to_unit: str) -> Dict[str, Any]:
    if from_unit == "fahrenheit":
        celsius = (temperature - 32) * 5 / 9
    elif from_unit == "kelvin":
        celsius = temperature - 273.15
    else:
        celsius = temperature

    if to_unit == "fahrenheit":
        converted = celsius * 9 / 5 + 32
    elif to_unit == "kelvin":
        converted = celsius + 273.15
    else:
        converted = celsius

    return {"converted_temperature": round_half_up(converted, 2), "unit": to_unit}


def heat_index(temperature: float, humidity: float) -> Dict[str, Any]:
    """NOAA Rothfusz regression. Not applicable below 80°F."""
    temp_f = temperature * 9 / 5 + 32

    if temp_f < 80:
        return {
            "heat_index": temperature,
            "description": "Heat index not applicable (temperature too low)",
        }

    hi = (
        -42.379
        + 2.04901523 * temp_f
        + 10.14333127 * humidity
        - 0.22475541 * temp_f * humidity
        - 0.00683783 * temp_f * temp_f
        - 0.05481717 * humidity * humidity
        + 0.00122874 * temp_f * temp_f * humidity
        + 0.00085282 * temp_f * humidity * humidity
        - 0.00000199 * temp_f * temp_f * humidity * humidity
    )

    if hi < 80:
        description = "No heat stress"
    elif hi < 90:
        description = "Caution: possible fatigue"
    elif hi < 105:
        description = "Extreme caution: heat cramps possible"
    elif hi < 130:
        description = "Danger: heat exhaustion likely"
    else:
        description = "Extreme danger: heat stroke imminent"

    return {"heat_index": round_half_up((hi - 32) * 5 / 9, 1), "description": description}


def wind_chill(temperature: float, wind_speed: float) -> Dict[str, Any]:
    """Environment Canada formula. Not applicable above 10°C or below 4.8 km/h."""
    wind_kmh = wind_speed * 3.6

    if temperature > 10 or wind_kmh < 4.8:
        return {"wind_chill": temperature, "description": "Wind chill not applicable"}

    factor = wind_kmh ** 0.16
    chill = 13.12 + 0.6215 * temperature - 11.37 * factor + 0.3965 * temperature * factor

    if chill > -10:
        description = "Low risk"
    elif chill > -28:
        description = "Moderate risk of frostbite"
    elif chill > -40:
        description = "High risk of frostbite"
    else:
        description = "Very high risk of frostbite"

    return {"wind_chill": round_half_up(chill, 1), "description": description}


def dew_point(temperature: float, humidity: float) -> Dict[str, Any]:
    """Magnus approximation."""
    if humidity <= 0:
        raise ValueError("Dew point is undefined at 0% humidity")

    alpha = (MAGNUS_A * temperature) / (MAGNUS_B + temperature) + math.log(humidity / 100)
    point = (MAGNUS_B * alpha) / (MAGNUS_A - alpha)

    spread = temperature - point
    if spread > 15:
        description = "Very dry, low humidity"
    elif spread > 10:
        description = "Comfortable humidity"
    elif spread > 5:
        description = "Slightly humid"
    elif spread > 2:
        description = "Humid and uncomfortable"
    else:
        description = "Very humid and oppressive"

    # Rounding must not lift the dew point above the air temperature
    return {"dew_point": min(round_half_up(point, 1), temperature), "description": description}


def comfort_index(temperature: float, humidity: float, wind_speed: float) -> Dict[str, Any]:
    """
    Heuristic 0-100 comfort score.

    Base 50, adjusted for deviation from 21°C, 50% humidity and a
    0.5-3 m/s breeze. The reported factor scores use their own formulas
    and do not sum to the aggregate.
    """
    score = 50

    temp_diff = abs(temperature - 21)
    if temp_diff < 2:
        score += 20
    elif temp_diff < 5:
        score += 10
    elif temp_diff < 10:
        score -= 10
    else:
        score -= 20

    humidity_diff = abs(humidity - 50)
    if humidity_diff < 10:
        score += 15
    elif humidity_diff < 20:
        score += 5
    elif humidity_diff < 30:
        score -= 5
    else:
        score -= 15

    if 0.5 < wind_speed < 3:
        score += 10
    elif wind_speed < 0.5:
        score -= 5
    elif wind_speed > 8:
        score -= 15

    score = clamp(score, 0, 100)

    if score >= 80:
        description = "Excellent weather conditions"
    elif score >= 60:
        description = "Good weather conditions"
    elif score >= 40:
        description = "Fair weather conditions"
    elif score >= 20:
        description = "Poor weather conditions"
    else:
        description = "Very poor weather conditions"

    if 0.5 < wind_speed < 3:
        wind_score = 10
    elif wind_speed > 8:
        wind_score = -15
    else:
        wind_score = -5

    return {
        "comfort_index": int(score),
        "description": description,
        "factors": {
            "temperature": temperature,
            "humidity": humidity,
            "wind_speed": wind_speed,
            "temperature_score": clamp(40 - temp_diff * 2, 0, 40),
            "humidity_score": clamp(30 - humidity_diff, 0, 30),
            "wind_score": wind_score,
        },
    }


def weather_summary(
    temperature: float, humidity: float, pressure: float, wind_speed: float
) -> Dict[str, Any]:
    recommendations: List[str] = []
    alerts: List[str] = []

    if temperature < 0:
        recommendations.append("Dress in layers and cover exposed skin")
        alerts.append("Freezing temperatures - risk of frostbite")
    elif temperature < 10:
        recommendations.append("Wear warm clothing and jacket")
    elif temperature > 30:
        recommendations.append("Stay hydrated and seek shade")
        if temperature > 35:
            alerts.append("Very hot weather - heat exhaustion possible")

    if humidity > 80:
        recommendations.append("High humidity may cause discomfort")
    elif humidity < 30:
        recommendations.append("Low humidity - stay hydrated")

    if wind_speed > 10:
        recommendations.append("Strong winds - secure loose objects")
        alerts.append("High wind speeds")

    if pressure < 1000:
        recommendations.append("Low pressure may indicate weather changes")
    elif pressure > 1020:
        recommendations.append("High pressure usually indicates stable weather")

    summary = (
        f"Temperature: {temperature}°C, Humidity: {humidity}%, "
        f"Wind: {wind_speed} m/s, Pressure: {pressure} hPa"
    )
    return {"summary": summary, "recommendations": recommendations, "alerts": alerts}


def pressure_trend(pressures: List[float]) -> Dict[str, Any]:
    """
    Compare the mean of the last 3 readings with the mean of the 3 before.

    |change| < 1 hPa is stable; |change| > 3 hPa is rapid.
    """
    if len(pressures) < 2:
        return {"trend": "insufficient data", "prediction": "Cannot determine trend", "strength": 0}

    recent = pressures[-3:]
    earlier = pressures[-6:-3]

    recent_avg = mean(recent)
    earlier_avg = mean(earlier) if earlier else recent_avg
    change = recent_avg - earlier_avg

    if abs(change) < 1:
        trend = "stable"
        prediction = "Weather conditions likely to remain stable"
    elif change > 0:
        trend = "rising"
        prediction = (
            "Rapidly improving weather expected" if change > 3
            else "Generally improving weather expected"
        )
    else:
        trend = "falling"
        prediction = (
            "Rapidly deteriorating weather possible" if change < -3
            else "Weather may deteriorate"
        )

    return {"trend": trend, "prediction": prediction, "strength": round_half_up(abs(change), 1)}


# ──────────────────────────────────────────────────────────────
# Engine
# ──────────────────────────────────────────────────────────────


class WeatherCalculations(ModuleCalculations):
    """Stateless weather engine."""

    module_name = "weather"

    def __init__(self):
        self._handlers: Dict[str, Callable[[Any], Dict[str, Any]]] = {
            "temperature_conversion": lambda d: convert_temperature(
                d["temperature"], d["from_unit"], d["to_unit"]
            ),
            "heat_index": lambda d: heat_index(d["temperature"], d["humidity"]),
            "wind_chill": lambda d: wind_chill(d["temperature"], d["wind_speed"]),
            "dew_point": lambda d: dew_point(d["temperature"], d["humidity"]),
            "comfort_index": lambda d: comfort_index(
                d["temperature"], d["humidity"], d["wind_speed"]
            ),
            "weather_summary": lambda d: weather_summary(
                d["temperature"], d["humidity"], d["pressure"], d["wind_speed"]
            ),
            "pressure_trend": lambda d: pressure_trend(list(d)),
        }

    async def calculate(self, input: CalculationInput) -> CalculationResult:
        started = time.perf_counter()

        try:
            handler = self._handlers.get(input.type)
            if handler is None:
                raise ValueError(f"Unsupported calculation type: {input.type}")
            data = handler(input.data)
        except (ValueError, KeyError, TypeError, ArithmeticError) as e:
            logger.debug(f"Weather calculation '{input.type}' failed: {e}")
            result = CalculationResult.failure(input.type, str(e), "engine_failure")
            result.metadata.processing_time = (time.perf_counter() - started) * 1000
            return result

        return CalculationResult(
            success=True,
            data=data,
            metadata=CalculationMetadata(
                calculation_type=input.type,
                timestamp=utc_timestamp(),
                processing_time=(time.perf_counter() - started) * 1000,
            ),
        )

    def validate_input(self, input: CalculationInput) -> bool:
        data = input.data
        if not data or input.module != self.module_name:
            return False

        if input.type == "pressure_trend":
            return (
                isinstance(data, list)
                and len(data) > 1
                and all(is_valid_number(p) for p in data)
            )

        if not isinstance(data, dict):
            return False

        if input.type == "temperature_conversion":
            return (
                is_valid_number(data.get("temperature"))
                and data.get("from_unit") in TEMPERATURE_UNITS
                and data.get("to_unit") in TEMPERATURE_UNITS
            )

        if input.type in ("heat_index", "dew_point"):
            return is_valid_number(data.get("temperature")) and _is_humidity(data.get("humidity"))

        if input.type == "wind_chill":
            return _has_numbers(data, "temperature", "wind_speed") and data["wind_speed"] >= 0

        if input.type in ("comfort_index", "weather_summary"):
            return (
                _has_numbers(data, "temperature", "pressure", "wind_speed")
                and _is_humidity(data.get("humidity"))
            )

        return False

    def get_supported_calculations(self) -> List[str]:
        return list(self._handlers)
