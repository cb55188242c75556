"""
opcalc core: expression language, errors, configuration, and public facade.
"""

from opcalc.core.errors import (
    CalculationError,
    CalculationParseError,
    CalculationRuntimeError,
    ConfigError,
)

__all__ = [
    "CalculationError",
    "CalculationParseError",
    "CalculationRuntimeError",
    "ConfigError",
]
