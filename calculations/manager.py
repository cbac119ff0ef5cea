"""
Workspace calculation dispatcher.

Single entry point for client-side (non-network) calculations, decoupled
from which module performs them.

Flow per request:
  1. Resolve input.module to a registered engine   → module_not_found
  2. engine.validate_input(input)                   → invalid_input
  3. await engine.calculate(input)                  → engine_failure on exception
  4. Overwrite metadata.processing_time with dispatcher wall time

Guarantees:
- Never raises: every outcome is a CalculationResult
- processing_time is always dispatcher-measured (ms, >= 0)
- batch_calculate preserves input order and isolates failures
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Sequence

from .base import (
    CalculationInput,
    CalculationMetadata,
    CalculationResult,
    ModuleCalculations,
    utc_timestamp,
)

logger = logging.getLogger(__name__)


def _elapsed_ms(started: float) -> float:
    return max(0.0, (time.perf_counter() - started) * 1000)


class WorkspaceCalculationsManager:
    """
    Registry of calculation engines keyed by module name.

    Engines are registered explicitly (see infra.bootstrap); the dispatcher
    never needs to change when a module is added.
    """

    def __init__(self, modules: Optional[Dict[str, ModuleCalculations]] = None):
        self._modules: Dict[str, ModuleCalculations] = dict(modules or {})

    def register_module(self, name: str, engine: ModuleCalculations) -> None:
        """Add or replace the engine for a module."""
        if name in self._modules:
            logger.info(f"Replacing calculation engine for module '{name}'")
        self._modules[name] = engine

    async def calculate(self, input: CalculationInput) -> CalculationResult:
        started = time.perf_counter()

        engine = self._modules.get(input.module)
        if engine is None:
            logger.debug(f"Calculation rejected: module '{input.module}' not registered")
            result = CalculationResult.failure(
                input.type, f"Module '{input.module}' not found", "module_not_found"
            )
            return self._stamp(result, input, started)

        try:
            if not engine.validate_input(input):
                logger.debug(f"Calculation rejected: invalid input for {input.module}.{input.type}")
                result = CalculationResult.failure(
                    input.type,
                    f"Invalid input for calculation '{input.type}' in module '{input.module}'",
                    "invalid_input",
                )
            else:
                result = await engine.calculate(input)
                if not isinstance(result, CalculationResult):
                    raise TypeError(
                        f"Engine '{input.module}' returned {type(result).__name__}, "
                        f"expected CalculationResult"
                    )
        except Exception as e:
            logger.warning(
                f"Calculation engine '{input.module}' raised during '{input.type}': {e}",
                exc_info=True,
            )
            result = CalculationResult.failure(
                input.type, str(e) or "Unknown error occurred", "engine_failure"
            )

        return self._stamp(result, input, started)

    def _stamp(self, result: CalculationResult, input: CalculationInput, started: float) -> CalculationResult:
        if result.metadata is None:
            result.metadata = CalculationMetadata(
                calculation_type=input.type, timestamp=utc_timestamp()
            )
        result.metadata.processing_time = _elapsed_ms(started)
        return result

    async def batch_calculate(self, inputs: Sequence[CalculationInput]) -> List[CalculationResult]:
        """Run all inputs concurrently; results[i] belongs to inputs[i]."""
        outcomes = await asyncio.gather(
            *(self.calculate(item) for item in inputs),
            return_exceptions=True,
        )

        results: List[CalculationResult] = []
        for item, outcome in zip(inputs, outcomes):
            if isinstance(outcome, CalculationResult):
                results.append(outcome)
            else:
                logger.error(f"Batch item {item.module}.{item.type} escaped dispatch: {outcome!r}")
                failed = CalculationResult.failure(
                    item.type, str(outcome) or "Batch calculation failed", "engine_failure"
                )
                failed.metadata.processing_time = 0.0
                results.append(failed)
        return results

    async def cross_module_calculate(
        self,
        primary_module: str,
        secondary_module: str,
        calculation: str,
        data: Any,
    ) -> CalculationResult:
        """
        Compose engines from two modules (e.g. ML predictions on weather data).

        Reserved extension point: always fails with not_implemented.
        """
        started = time.perf_counter()
        result = CalculationResult.failure(
            calculation,
            f"Cross-module calculations not yet implemented "
            f"({primary_module} → {secondary_module})",
            "not_implemented",
        )
        result.metadata.processing_time = _elapsed_ms(started)
        return result

    # ── Introspection ─────────────────────────────────────────

    def get_all_calculations(self) -> Dict[str, List[str]]:
        return {
            name: engine.get_supported_calculations()
            for name, engine in self._modules.items()
        }

    def get_module_calculations(self, module_name: str) -> List[str]:
        engine = self._modules.get(module_name)
        return engine.get_supported_calculations() if engine else []

    def is_calculation_supported(self, module_name: str, calculation_type: str) -> bool:
        return calculation_type in self.get_module_calculations(module_name)

    def get_available_modules(self) -> List[str]:
        return list(self._modules)
