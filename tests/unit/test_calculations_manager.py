"""
Calculation dispatcher tests.

The dispatcher must never raise: unknown modules, rejected input and
engine crashes all come back as CalculationResult(success=False).
"""

from typing import List

import pytest

from calculations import (
    CalculationInput,
    CalculationMetadata,
    CalculationResult,
    ModuleCalculations,
    WeatherCalculations,
    WorkspaceCalculationsManager,
)


# ─────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────


class SlowReportingEngine(ModuleCalculations):
    """Reports a bogus processing time of its own."""

    async def calculate(self, input: CalculationInput) -> CalculationResult:
        return CalculationResult(
            success=True,
            data={"echo": input.data},
            metadata=CalculationMetadata(
                calculation_type=input.type,
                timestamp="2024-01-01T00:00:00+00:00",
                processing_time=999999,
            ),
        )

    def validate_input(self, input: CalculationInput) -> bool:
        return True

    def get_supported_calculations(self) -> List[str]:
        return ["echo"]


class CrashingEngine(ModuleCalculations):

    async def calculate(self, input: CalculationInput) -> CalculationResult:
        raise RuntimeError("engine exploded")

    def validate_input(self, input: CalculationInput) -> bool:
        return True

    def get_supported_calculations(self) -> List[str]:
        return ["explode"]


class WrongReturnEngine(SlowReportingEngine):

    async def calculate(self, input: CalculationInput) -> CalculationResult:
        return None


class NoMetadataEngine(SlowReportingEngine):

    async def calculate(self, input: CalculationInput) -> CalculationResult:
        return CalculationResult(success=True, data=1)


def make_manager() -> WorkspaceCalculationsManager:
    manager = WorkspaceCalculationsManager()
    manager.register_module("weather", WeatherCalculations())
    return manager


TREND = CalculationInput(
    type="pressure_trend",
    module="weather",
    data=[1010, 1011, 1012, 1015, 1016, 1018],
)


# ─────────────────────────────────────────────────────
# Dispatch
# ─────────────────────────────────────────────────────


class TestCalculate:

    @pytest.mark.asyncio
    async def test_pressure_trend_rising(self):
        result = await make_manager().calculate(TREND)

        assert result.success is True
        assert result.data["trend"] == "rising"
        assert result.data["prediction"] != "Cannot determine trend"

    @pytest.mark.asyncio
    async def test_unknown_module(self):
        result = await make_manager().calculate(
            CalculationInput(type="roi", module="finance", data={"x": 1})
        )

        assert result.success is False
        assert result.error_type == "module_not_found"
        assert "finance" in result.error
        assert result.metadata.processing_time >= 0

    @pytest.mark.asyncio
    async def test_invalid_input_never_reaches_engine(self):
        result = await make_manager().calculate(
            CalculationInput(type="heat_index", module="weather", data={"temperature": 30, "humidity": 150})
        )

        assert result.success is False
        assert result.error_type == "invalid_input"
        assert result.error == "Invalid input for calculation 'heat_index' in module 'weather'"

    @pytest.mark.asyncio
    async def test_engine_exception_becomes_failure(self):
        manager = WorkspaceCalculationsManager({"boom": CrashingEngine()})

        result = await manager.calculate(CalculationInput(type="explode", module="boom", data=1))

        assert result.success is False
        assert result.error_type == "engine_failure"
        assert result.error == "engine exploded"

    @pytest.mark.asyncio
    async def test_engine_returning_non_result_becomes_failure(self):
        manager = WorkspaceCalculationsManager({"odd": WrongReturnEngine()})

        result = await manager.calculate(CalculationInput(type="echo", module="odd", data=1))

        assert result.success is False
        assert result.error_type == "engine_failure"
        assert "NoneType" in result.error
        assert result.metadata.processing_time >= 0

    @pytest.mark.asyncio
    async def test_oversized_integer_is_invalid_input(self):
        result = await make_manager().calculate(
            CalculationInput(type="heat_index", module="weather", data={"temperature": 10**400, "humidity": 50})
        )

        assert result.success is False
        assert result.error_type == "invalid_input"

    @pytest.mark.asyncio
    async def test_processing_time_is_dispatcher_measured(self):
        manager = WorkspaceCalculationsManager({"echo": SlowReportingEngine()})

        result = await manager.calculate(CalculationInput(type="echo", module="echo", data="hi"))

        assert result.success is True
        assert 0 <= result.metadata.processing_time < 999999

    @pytest.mark.asyncio
    async def test_metadata_added_when_engine_omits_it(self):
        manager = WorkspaceCalculationsManager({"bare": NoMetadataEngine()})

        result = await manager.calculate(CalculationInput(type="echo", module="bare", data=None))

        assert result.metadata.calculation_type == "echo"
        assert result.metadata.processing_time >= 0


class TestBatchCalculate:

    @pytest.mark.asyncio
    async def test_order_preserved_and_failures_isolated(self):
        inputs = [
            TREND,
            CalculationInput(type="heat_index", module="astrology", data={"temperature": 30}),
            CalculationInput(
                type="temperature_conversion",
                module="weather",
                data={"temperature": 100, "from_unit": "celsius", "to_unit": "fahrenheit"},
            ),
        ]

        results = await make_manager().batch_calculate(inputs)

        assert len(results) == 3
        assert results[0].success is True
        assert results[0].data["trend"] == "rising"
        assert results[1].success is False
        assert "astrology" in results[1].error
        assert results[2].success is True
        assert results[2].data["converted_temperature"] == 212.0
        assert [r.metadata.calculation_type for r in results] == [
            "pressure_trend",
            "heat_index",
            "temperature_conversion",
        ]

    @pytest.mark.asyncio
    async def test_empty_batch(self):
        assert await make_manager().batch_calculate([]) == []


class TestCrossModule:

    @pytest.mark.asyncio
    async def test_not_implemented(self):
        result = await make_manager().cross_module_calculate("weather", "ml", "forecast_model", {})

        assert result.success is False
        assert result.error_type == "not_implemented"
        assert result.metadata.calculation_type == "forecast_model"
        assert result.metadata.processing_time >= 0


class TestIntrospection:

    def test_available_modules(self):
        assert make_manager().get_available_modules() == ["weather"]

    def test_module_calculations(self):
        manager = make_manager()

        assert "dew_point" in manager.get_module_calculations("weather")
        assert manager.get_module_calculations("finance") == []
        assert manager.get_all_calculations() == {
            "weather": manager.get_module_calculations("weather")
        }

    def test_is_calculation_supported(self):
        manager = make_manager()

        assert manager.is_calculation_supported("weather", "wind_chill") is True
        assert manager.is_calculation_supported("weather", "roi") is False
        assert manager.is_calculation_supported("finance", "roi") is False

    def test_register_replaces_engine(self):
        manager = make_manager()
        manager.register_module("weather", SlowReportingEngine())

        assert manager.get_module_calculations("weather") == ["echo"]
