"""
opcalc - compile, run, and constant-fold small arithmetic expressions.

Usage:
    import opcalc

    context = opcalc.new_context()
    opcalc.new_program("a = 5").execute(context)       # 5.0
    opcalc.new_program("a + 1").optimize().execute(context)  # 6.0
"""

from __future__ import annotations

from opcalc._version import get_version
from opcalc.core.api import PublicContext, PublicProgram, new_context, new_program
from opcalc.core.errors import (
    CalculationError,
    CalculationParseError,
    CalculationRuntimeError,
    ConfigError,
)

__version__ = get_version()

__all__ = [
    "__version__",
    "CalculationError",
    "CalculationParseError",
    "CalculationRuntimeError",
    "ConfigError",
    "PublicContext",
    "PublicProgram",
    "new_context",
    "new_program",
]
