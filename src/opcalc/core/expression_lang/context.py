"""
Execution contexts for compiled opcalc programs.

A context owns the evaluation stack and the register store that opcodes
run against. Stack elements are either literals or references to a named
register in the context they were pushed into.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping

from opcalc.core.errors import CalculationRuntimeError

logger = logging.getLogger(__name__)


class StackElement(ABC):
    """A value on a context's evaluation stack."""

    @property
    @abstractmethod
    def value(self) -> float: ...

    @value.setter
    @abstractmethod
    def value(self, new_value: float) -> None: ...

    @abstractmethod
    def bind(self, context: Context) -> StackElement:
        """Return this element as seen from ``context``."""


class Literal(StackElement):
    """An immutable number on the stack."""

    __slots__ = ("_value",)

    def __init__(self, value: float) -> None:
        self._value = float(value)

    @property
    def value(self) -> float:
        return self._value

    @value.setter
    def value(self, new_value: float) -> None:
        raise CalculationRuntimeError("Cannot assign a value to a literal")

    def bind(self, context: Context) -> Literal:
        return self

    def __repr__(self) -> str:
        return f"Literal({self._value!r})"


class VariableReference(StackElement):
    """
    A stack value that defers to a named register of its context.

    The context is borrowed, not owned: a reference lives no longer than the
    ``execute``/``optimize`` call that created it.
    """

    __slots__ = ("name", "context")

    def __init__(self, name: str, context: Context) -> None:
        self.name = name
        self.context = context

    @property
    def value(self) -> float:
        result = self.context.get_register(self.name)
        return 0.0 if result is None else result

    @value.setter
    def value(self, new_value: float) -> None:
        self.context.set_register(self.name, new_value)

    def bind(self, context: Context) -> VariableReference:
        if context is self.context:
            return self
        return VariableReference(self.name, context)

    def __repr__(self) -> str:
        return f"VariableReference({self.name!r})"


class Context(ABC):
    """Evaluation stack plus register store that opcodes operate on."""

    def __init__(self) -> None:
        self._stack: list[StackElement] = []

    def pop_stack(self) -> StackElement:
        if not self._stack:
            raise CalculationRuntimeError("Stack underflow: the program is malformed")
        return self._stack.pop()

    def push_stack(self, element: StackElement) -> None:
        self._stack.append(element.bind(self))

    @property
    def stack_depth(self) -> int:
        return len(self._stack)

    @property
    def top(self) -> StackElement | None:
        return self._stack[-1] if self._stack else None

    @abstractmethod
    def get_register(self, name: str) -> float | None: ...

    @abstractmethod
    def set_register(self, name: str, value: float) -> None: ...

    @abstractmethod
    def set_registers(self, values: Mapping[str, float]) -> None: ...

    @abstractmethod
    def clear_registers(self) -> None: ...


class ExecutionContext(Context):
    """A context with real register storage."""

    def __init__(self, registers: Mapping[str, float] | None = None) -> None:
        super().__init__()
        self._registers: dict[str, float] = {}
        if registers:
            self.set_registers(registers)

    def get_register(self, name: str) -> float | None:
        return self._registers.get(name)

    def set_register(self, name: str, value: float) -> None:
        self._registers[name] = float(value)

    def set_registers(self, values: Mapping[str, float]) -> None:
        for name, value in values.items():
            self.set_register(name, value)

    def clear_registers(self) -> None:
        self._registers.clear()

    def merge_into(self, other: Context) -> None:
        """Copy every register of this context into ``other``."""
        logger.debug("Merging %d register(s) into %r", len(self._registers), other)
        other.set_registers(self._registers)

    @property
    def registers(self) -> dict[str, float]:
        """A snapshot of the current registers."""
        return dict(self._registers)

    def __repr__(self) -> str:
        return f"ExecutionContext(registers={self._registers!r})"


def new_context() -> ExecutionContext:
    """Create a fresh, empty execution context."""
    return ExecutionContext()
