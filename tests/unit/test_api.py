"""Tests for the public opcalc facade."""

from __future__ import annotations

import pytest

import opcalc
from opcalc import CalculationParseError, CalculationRuntimeError, PublicProgram


class TestPublicContext:
    """PublicContext forwards register operations only."""

    def test_registers(self) -> None:
        context = opcalc.new_context()
        assert context.get_register("a") is None
        context.set_register("a", 3)
        context.set_registers({"b": 4, "c": 5})
        assert context.get_register("a") == 3
        assert context.get_register("c") == 5
        context.clear_registers()
        assert context.get_register("b") is None

    def test_merge_into(self) -> None:
        defaults = opcalc.new_context()
        defaults.set_register("pi", 3.0)
        fresh = opcalc.new_context()
        defaults.merge_into(fresh)
        assert fresh.get_register("pi") == 3.0

    def test_registers_snapshot(self) -> None:
        context = opcalc.new_context()
        context.set_register("a", 1.0)
        snapshot = context.registers
        snapshot["a"] = 99.0
        snapshot["b"] = 2.0
        assert context.registers == {"a": 1.0}

    def test_no_stack_access(self) -> None:
        context = opcalc.new_context()
        assert not hasattr(context, "push_stack")
        assert not hasattr(context, "pop_stack")


class TestPublicProgram:
    """PublicProgram exposes execute, optimize, num_opcodes, and str."""

    def test_execute_with_context(self) -> None:
        context = opcalc.new_context()
        assert opcalc.new_program("a=5").execute(context) == 5
        assert context.get_register("a") == 5
        assert opcalc.new_program("a+1").execute(context) == 6

    def test_execute_without_context(self) -> None:
        assert opcalc.new_program("2+3*4").execute() == 14

    def test_optimize(self) -> None:
        optimized = opcalc.new_program("2+3").optimize()
        assert isinstance(optimized, PublicProgram)
        assert optimized.num_opcodes == 1
        assert optimized.execute() == 5

    def test_optimize_without_gain_returns_same(self) -> None:
        program = opcalc.new_program("a+1")
        assert program.optimize() is program

    def test_str(self) -> None:
        assert str(opcalc.new_program("1+2")) == "number 1\nnumber 2\nadd"

    def test_parse_error(self) -> None:
        with pytest.raises(CalculationParseError) as exc_info:
            opcalc.new_program("1+@")
        assert exc_info.value.offset == 2

    def test_runtime_error(self) -> None:
        with pytest.raises(CalculationRuntimeError):
            opcalc.new_program("1=2").execute()

    def test_errors_share_base(self) -> None:
        assert issubclass(CalculationParseError, opcalc.CalculationError)
        assert issubclass(CalculationRuntimeError, opcalc.CalculationError)


def test_version() -> None:
    assert isinstance(opcalc.__version__, str)
