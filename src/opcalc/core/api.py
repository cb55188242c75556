"""
Public facade over the opcalc core.

``PublicContext`` and ``PublicProgram`` forward a fixed set of operations to
the core objects they wrap and expose nothing else. Hosts (the CLI, UIs,
embedding applications) should go through this module.
"""

from __future__ import annotations

from collections.abc import Mapping

from opcalc.core.expression_lang.context import ExecutionContext
from opcalc.core.expression_lang.program import Program


class PublicContext:
    """Register store handed to hosts."""

    __slots__ = ("_context",)

    def __init__(self, context: ExecutionContext | None = None) -> None:
        self._context = context if context is not None else ExecutionContext()

    def get_register(self, name: str) -> float | None:
        return self._context.get_register(name)

    def set_register(self, name: str, value: float) -> None:
        self._context.set_register(name, value)

    def set_registers(self, values: Mapping[str, float]) -> None:
        self._context.set_registers(values)

    def clear_registers(self) -> None:
        self._context.clear_registers()

    @property
    def registers(self) -> dict[str, float]:
        """A snapshot of the current registers."""
        return self._context.registers

    def merge_into(self, other: PublicContext) -> None:
        """Copy all registers of this context into ``other``."""
        self._context.merge_into(other._context)

    def __str__(self) -> str:
        return str(self._context)


class PublicProgram:
    """Compiled program handed to hosts."""

    __slots__ = ("_program",)

    def __init__(self, program: Program) -> None:
        self._program = program

    def execute(self, context: PublicContext | None = None) -> float:
        return self._program.execute(context._context if context is not None else None)

    def optimize(self) -> PublicProgram:
        optimized = self._program.optimize()
        if optimized is self._program:
            return self
        return PublicProgram(optimized)

    @property
    def num_opcodes(self) -> int:
        return self._program.num_opcodes

    def __str__(self) -> str:
        return str(self._program)


def new_context() -> PublicContext:
    """Create an empty register store."""
    return PublicContext()


def new_program(source: str) -> PublicProgram:
    """Compile an expression.

    Raises:
        CalculationParseError: If ``source`` is not a valid expression.
    """
    return PublicProgram(Program(source))
