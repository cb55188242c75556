"""Tests for execution contexts and stack elements."""

from __future__ import annotations

import pytest

from opcalc.core.errors import CalculationRuntimeError
from opcalc.core.expression_lang.context import (
    ExecutionContext,
    Literal,
    VariableReference,
    new_context,
)


class TestRegisters:
    """Register store behaviour."""

    def test_unset_register_is_none(self, context: ExecutionContext) -> None:
        assert context.get_register("missing") is None

    def test_set_and_get(self, context: ExecutionContext) -> None:
        context.set_register("a", 2)
        assert context.get_register("a") == 2.0
        assert isinstance(context.get_register("a"), float)

    def test_set_registers(self, context: ExecutionContext) -> None:
        context.set_registers({"a": 1, "b": 2.5})
        assert context.registers == {"a": 1.0, "b": 2.5}

    def test_clear_registers(self, context: ExecutionContext) -> None:
        context.set_register("a", 1)
        context.clear_registers()
        assert context.registers == {}

    def test_initial_registers(self) -> None:
        assert ExecutionContext({"x": 4}).get_register("x") == 4

    def test_merge_into(self) -> None:
        defaults = ExecutionContext({"pi": 3.14, "e": 2.72})
        target = new_context()
        target.set_register("x", 1)
        defaults.merge_into(target)
        assert target.registers == {"pi": 3.14, "e": 2.72, "x": 1.0}
        assert defaults.registers == {"pi": 3.14, "e": 2.72}

    def test_registers_snapshot_is_a_copy(self, context: ExecutionContext) -> None:
        context.registers["a"] = 1.0
        assert context.get_register("a") is None


class TestStack:
    """Evaluation stack behaviour."""

    def test_lifo(self, context: ExecutionContext) -> None:
        context.push_stack(Literal(1))
        context.push_stack(Literal(2))
        assert context.pop_stack().value == 2
        assert context.pop_stack().value == 1

    def test_underflow(self, context: ExecutionContext) -> None:
        with pytest.raises(CalculationRuntimeError, match="underflow"):
            context.pop_stack()

    def test_depth_and_top(self, context: ExecutionContext) -> None:
        assert context.top is None
        context.push_stack(Literal(5))
        assert context.stack_depth == 1
        assert context.top.value == 5


class TestStackElements:
    """Literals and variable references."""

    def test_literal_is_read_only(self) -> None:
        literal = Literal(3)
        with pytest.raises(CalculationRuntimeError, match="literal"):
            literal.value = 4

    def test_reference_reads_register(self, context: ExecutionContext) -> None:
        context.set_register("a", 9)
        assert VariableReference("a", context).value == 9

    def test_reference_defaults_to_zero(self, context: ExecutionContext) -> None:
        assert VariableReference("nope", context).value == 0

    def test_reference_writes_register(self, context: ExecutionContext) -> None:
        VariableReference("a", context).value = 7
        assert context.get_register("a") == 7

    def test_push_rebinds_reference(self) -> None:
        origin = ExecutionContext({"x": 1})
        target = ExecutionContext({"x": 2})
        target.push_stack(VariableReference("x", origin))
        pushed = target.pop_stack()
        assert isinstance(pushed, VariableReference)
        assert pushed.context is target
        assert pushed.value == 2

    def test_push_keeps_literal(self, context: ExecutionContext) -> None:
        literal = Literal(1)
        context.push_stack(literal)
        assert context.pop_stack() is literal
