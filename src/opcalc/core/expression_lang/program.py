"""
Compiled opcalc programs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from opcalc.core.expression_lang.compiler import compile_source
from opcalc.core.expression_lang.context import Context, new_context
from opcalc.core.expression_lang.opcodes import Opcode, perform
from opcalc.core.expression_lang.optimizer import fold_opcodes

logger = logging.getLogger(__name__)


class Program:
    """An immutable, ordered opcode sequence.

    Built either from expression source (tokenized and compiled) or from
    an explicit opcode sequence. Safe to share and execute repeatedly
    against independent contexts.
    """

    __slots__ = ("_ops",)

    def __init__(self, source: str | Iterable[Opcode]) -> None:
        if isinstance(source, str):
            ops = compile_source(source)
            logger.debug("Compiled %r into %d opcode(s)", source, len(ops))
        else:
            ops = list(source)
        self._ops: tuple[Opcode, ...] = tuple(ops)

    def execute(self, context: Context | None = None) -> float:
        """Run the program and return the value left on the stack.

        Args:
            context: Context to run in; a fresh one is used when omitted.

        Raises:
            CalculationRuntimeError: On stack underflow or a failing operator.
                Registers written before the failure keep their new values.
        """
        real_context = context if context is not None else new_context()
        for op in self._ops:
            perform(op, real_context)
        return real_context.pop_stack().value

    def optimize(self) -> Program:
        """Return an equivalent program with constant parts precomputed.

        The receiver is returned unchanged when nothing can be folded.
        """
        folded = fold_opcodes(self._ops)
        if folded is None:
            return self
        return Program(folded)

    @property
    def opcodes(self) -> tuple[Opcode, ...]:
        return self._ops

    @property
    def num_opcodes(self) -> int:
        return len(self._ops)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Program):
            return NotImplemented
        return self._ops == other._ops

    def __hash__(self) -> int:
        return hash(self._ops)

    def __str__(self) -> str:
        """One opcode per line, for debugging."""
        return "\n".join(str(op) for op in self._ops)

    def __repr__(self) -> str:
        return f"Program({len(self._ops)} opcodes)"


def new_program(source: str) -> Program:
    """Compile ``source`` into a program."""
    return Program(source)
