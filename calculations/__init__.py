"""
Calculation engine exports.

Clean interface for callers to import calculation components.
"""

from .base import (
    CalculationErrorType,
    CalculationInput,
    CalculationMetadata,
    CalculationResult,
    ModuleCalculations,
)
from .manager import WorkspaceCalculationsManager
from .weather import WeatherCalculations

__all__ = [
    "CalculationErrorType",
    "CalculationInput",
    "CalculationMetadata",
    "CalculationResult",
    "ModuleCalculations",
    "WorkspaceCalculationsManager",
    "WeatherCalculations",
]
