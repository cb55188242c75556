"""
Opcode model for the opcalc stack machine.

Each opcode kind carries an operator symbol (when it has one), an execution
rule over a context, and a token conversion rule. The rules are a closed
dispatch over ``OpcodeKind`` and never change at runtime.
"""

from __future__ import annotations

import math
from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from opcalc.core.errors import CalculationRuntimeError
from opcalc.core.expression_lang.context import (
    Context,
    Literal,
    StackElement,
    VariableReference,
)

if TYPE_CHECKING:
    from opcalc.core.expression_lang.tokenizer import Token


class OpcodeKind(StrEnum):
    """Instruction kinds shared by tokens and opcodes."""

    NUMBER = "number"
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"
    POWER = "power"
    IDENTIFIER = "identifier"
    ASSIGN = "assign"
    OPEN_BRACKET = "openBracket"
    CLOSE_BRACKET = "closeBracket"


SYMBOLS: dict[OpcodeKind, str] = {
    OpcodeKind.ADD: "+",
    OpcodeKind.SUBTRACT: "-",
    OpcodeKind.MULTIPLY: "*",
    OpcodeKind.DIVIDE: "/",
    OpcodeKind.POWER: "**",
    OpcodeKind.ASSIGN: "=",
    OpcodeKind.OPEN_BRACKET: "(",
    OpcodeKind.CLOSE_BRACKET: ")",
}

BINARY_KINDS = frozenset(
    {
        OpcodeKind.ADD,
        OpcodeKind.SUBTRACT,
        OpcodeKind.MULTIPLY,
        OpcodeKind.DIVIDE,
        OpcodeKind.POWER,
    }
)


def format_number(value: float) -> str:
    """Render a number the way the opcode dump shows it (``1`` not ``1.0``)."""
    if math.isfinite(value) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


class Opcode(BaseModel):
    """A single compiled instruction."""

    kind: OpcodeKind = Field(description="Instruction kind")
    value: float | str | None = Field(default=None, description="Literal or register name")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        if self.value is None:
            return str(self.kind)
        if isinstance(self.value, float):
            return f"{self.kind} {format_number(self.value)}"
        return f"{self.kind} {self.value}"


def opcode_from_token(token: Token) -> Opcode:
    """Convert a token to its opcode; numbers have their text parsed."""
    if token.kind == OpcodeKind.NUMBER:
        return Opcode(kind=token.kind, value=float(token.value))
    return Opcode(kind=token.kind, value=token.value)


def opcode_from_element(element: StackElement) -> Opcode:
    """Convert a stack element back into the opcode that would push it."""
    if isinstance(element, VariableReference):
        return Opcode(kind=OpcodeKind.IDENTIFIER, value=element.name)
    return Opcode(kind=OpcodeKind.NUMBER, value=element.value)


def perform(opcode: Opcode, context: Context) -> None:
    """Execute one opcode against ``context``."""
    kind = opcode.kind

    if kind == OpcodeKind.NUMBER:
        context.push_stack(Literal(opcode.value))
        return

    if kind == OpcodeKind.IDENTIFIER:
        context.push_stack(VariableReference(opcode.value, context))
        return

    if kind == OpcodeKind.ASSIGN:
        value = context.pop_stack().value
        target = context.pop_stack()
        if not isinstance(target, VariableReference):
            raise CalculationRuntimeError("Can only assign to a variable")
        target.value = value
        context.push_stack(Literal(value))
        return

    if kind in BINARY_KINDS:
        right = context.pop_stack().value
        left = context.pop_stack().value
        context.push_stack(Literal(_apply_binary(kind, left, right)))
        return

    raise CalculationRuntimeError(f"Opcode {kind} cannot be executed")


def _apply_binary(kind: OpcodeKind, left: float, right: float) -> float:
    """Arithmetic for the binary operators, right operand popped first."""
    if kind == OpcodeKind.ADD:
        return right + left
    if kind == OpcodeKind.SUBTRACT:
        return -right + left
    if kind == OpcodeKind.MULTIPLY:
        return right * left
    if kind == OpcodeKind.DIVIDE:
        return _divide(left, right)
    if kind == OpcodeKind.POWER:
        return _power(left, right)
    raise CalculationRuntimeError(f"Unknown binary opcode: {kind}")


def _divide(left: float, right: float) -> float:
    """IEEE 754 division: zero divisors give infinities or NaN."""
    if right == 0.0:
        if left == 0.0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def _is_odd_integer(value: float) -> bool:
    return math.isfinite(value) and value.is_integer() and int(value) % 2 == 1


def _power(left: float, right: float) -> float:
    """IEEE 754 exponentiation that yields inf/NaN instead of raising."""
    if math.isnan(right) or (abs(left) == 1.0 and math.isinf(right)):
        return math.nan
    try:
        return math.pow(left, right)
    except OverflowError:
        if left < 0 and _is_odd_integer(right):
            return -math.inf
        return math.inf
    except ValueError:
        # 0 ** negative, or negative ** fractional
        if left == 0.0:
            if math.copysign(1.0, left) < 0 and _is_odd_integer(right):
                return -math.inf
            return math.inf
        return math.nan
