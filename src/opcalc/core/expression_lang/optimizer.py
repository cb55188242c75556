"""
Constant folding for compiled opcalc programs.

The optimizer replays an opcode sequence against a symbolic context. Values
computed only from literals stay on the symbolic stack and are never emitted
unless an opcode that touches a register needs them as operands.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from opcalc.core.expression_lang.context import (
    Context,
    Literal,
    StackElement,
    VariableReference,
)
from opcalc.core.expression_lang.opcodes import (
    Opcode,
    OpcodeKind,
    opcode_from_element,
    perform,
)

logger = logging.getLogger(__name__)

# Register value seen by every read during optimization
REGISTER_SENTINEL = 1.0
UNKNOWN_NAME = "**unknown**"


class OptimizationContext(Context):
    """A context whose registers are never materialized.

    Any register access marks the next pushed element as an unknown
    placeholder instead of the value the rule computed.
    """

    def __init__(self) -> None:
        super().__init__()
        self._register_access = False

    def get_register(self, name: str) -> float | None:
        self._register_access = True
        return REGISTER_SENTINEL

    def set_register(self, name: str, value: float) -> None:
        self._register_access = True

    def set_registers(self, values: Mapping[str, float]) -> None:
        self._register_access = True

    def clear_registers(self) -> None:
        self._register_access = True

    def push_stack(self, element: StackElement) -> None:
        if self._register_access:
            element = VariableReference(UNKNOWN_NAME, self)
            self._register_access = False
        super().push_stack(element)

    @property
    def top_is_literal(self) -> bool:
        return isinstance(self.top, Literal)

    def stack_since(self, start: int) -> list[StackElement]:
        return self._stack[start:]


def fold_opcodes(ops: Sequence[Opcode]) -> list[Opcode] | None:
    """Precompute everything in ``ops`` that does not depend on a register.

    Returns:
        The folded opcode list, or None when folding would not shorten ``ops``.

    Raises:
        CalculationRuntimeError: If replaying the opcodes fails.
    """
    context = OptimizationContext()
    new_ops: list[Opcode] = []
    # Stack depth up to which the output already rebuilds the stack
    bound = 0

    for op in ops:
        # Literal-only values pushed since the last emitted opcode
        pending = context.stack_since(bound) if context.top_is_literal else None

        perform(op, context)

        if not context.top_is_literal:
            if pending:
                new_ops.extend(opcode_from_element(e) for e in pending)
            new_ops.append(op)
            bound = context.stack_depth

    top = context.top
    if isinstance(top, Literal):
        logger.debug("Folded %d opcode(s) into a constant", len(ops))
        return [Opcode(kind=OpcodeKind.NUMBER, value=top.value)]

    if len(new_ops) < len(ops):
        logger.debug("Optimized %d opcode(s) down to %d", len(ops), len(new_ops))
        return new_ops

    logger.debug("Nothing to fold in %d opcode(s)", len(ops))
    return None
