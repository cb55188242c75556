"""
Calculator configuration loaded from ``opcalc.toml``.

Example file:

    [calculator]
    optimize = true
    last_register = "last"

    [registers]
    pi = 3.141592653589793
    g = 9.81

Resolution order for the file: explicit path, then the ``OPCALC_CONFIG``
environment variable, then ``./opcalc.toml``. A missing file yields defaults.
"""

from __future__ import annotations

import logging
import math
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from opcalc.core.errors import ConfigError
from opcalc.core.expression_lang.context import ExecutionContext

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "OPCALC_CONFIG"
DEFAULT_CONFIG_NAME = "opcalc.toml"


@dataclass
class CalculatorConfig:
    """Settings for hosts that evaluate expressions."""

    optimize: bool = True  # Optimize programs before executing them
    last_register: str = "last"  # Receives each REPL result
    registers: dict[str, float] = field(default_factory=dict)  # Default register values

    def new_context(self) -> ExecutionContext:
        """Create a fresh context seeded with the default registers."""
        defaults = ExecutionContext(self.registers)
        context = ExecutionContext()
        defaults.merge_into(context)
        return context


def resolve_config_path(path: Path | None = None) -> Path:
    """Pick the config file location (which may not exist)."""
    if path is not None:
        return path
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return Path.cwd() / DEFAULT_CONFIG_NAME


def load_config(path: Path | None = None) -> CalculatorConfig:
    """Load calculator settings, falling back to defaults when no file exists.

    Raises:
        ConfigError: If the file is not valid TOML or has invalid values.
    """
    config_path = resolve_config_path(path)
    if not config_path.exists():
        logger.debug("No config at %s, using defaults", config_path)
        return CalculatorConfig()

    try:
        data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    calculator = data.get("calculator", {})
    registers_data = data.get("registers", {})

    optimize = calculator.get("optimize", True)
    if not isinstance(optimize, bool):
        raise ConfigError(f"calculator.optimize must be true or false, got {optimize!r}")

    last_register = calculator.get("last_register", "last")
    if not isinstance(last_register, str) or not last_register:
        raise ConfigError(f"calculator.last_register must be a name, got {last_register!r}")

    registers: dict[str, float] = {}
    for name, value in registers_data.items():
        # bool is an int subclass but never a register value
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise ConfigError(f"Register {name!r} must be a number, got {value!r}")
        registers[name] = float(value)
        if not math.isfinite(registers[name]):
            logger.warning("Register %r has non-finite default %r", name, value)

    logger.debug("Loaded config from %s with %d register(s)", config_path, len(registers))
    return CalculatorConfig(
        optimize=optimize,
        last_register=last_register,
        registers=registers,
    )
