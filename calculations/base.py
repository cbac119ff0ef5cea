"""
Calculation engine abstract interface.

Role: synchronous, client-side computations for one workspace module.

Rules:
- Pure and deterministic (no network, no shared state)
- Never suspends, even though calculate() is a coroutine
- Failures are encoded in CalculationResult, never raised to callers
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional


CalculationErrorType = Literal[
    "module_not_found",
    "invalid_input",
    "engine_failure",
    "not_implemented",
]


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class CalculationInput:
    """One calculation request."""

    type: str  # e.g. "heat_index", "pressure_trend"
    module: str  # e.g. "weather"
    data: Any
    options: Optional[Dict[str, Any]] = None


@dataclass
class CalculationMetadata:
    calculation_type: str
    timestamp: str
    processing_time: Optional[float] = None  # milliseconds


@dataclass
class CalculationResult:
    """Outcome of one calculation. success=False is the normal error path."""

    success: bool
    data: Any = None
    error: Optional[str] = None
    error_type: Optional[CalculationErrorType] = None
    metadata: Optional[CalculationMetadata] = None

    @classmethod
    def failure(
        cls,
        calculation_type: str,
        error: str,
        error_type: CalculationErrorType,
    ) -> "CalculationResult":
        return cls(
            success=False,
            data=None,
            error=error,
            error_type=error_type,
            metadata=CalculationMetadata(
                calculation_type=calculation_type,
                timestamp=utc_timestamp(),
            ),
        )


class ModuleCalculations(ABC):
    """
    Capability contract for a module's calculation engine.
    The dispatcher depends ONLY on this interface.
    """

    @abstractmethod
    async def calculate(self, input: CalculationInput) -> CalculationResult:
        """
        Run one calculation.

        Args:
            input: CalculationInput already accepted by validate_input()

        Returns:
            CalculationResult with data or an explicit error
        """
        raise NotImplementedError

    @abstractmethod
    def validate_input(self, input: CalculationInput) -> bool:
        """Field-level check run by the dispatcher before calculate()."""
        raise NotImplementedError

    @abstractmethod
    def get_supported_calculations(self) -> List[str]:
        raise NotImplementedError
