"""
Precedence-climbing compiler for opcalc expressions.

Grammar (precedence low to high, every level left-associative):
    expr      → assign
    assign    → addition ("=" addition)*
    addition  → multiply (("+" | "-") multiply)*
    multiply  → power (("*" | "/") power)*
    power     → primary ("**" primary)*
    primary   → NUMBER | IDENT | "-" NUMBER | "(" expr ")"

Opcodes are emitted in postfix order straight into the output list as each
level unwinds: left operand, right operand, operator. No syntax tree is built.
"""

from __future__ import annotations

from collections.abc import Iterable

from opcalc.core.errors import CalculationParseError
from opcalc.core.expression_lang.opcodes import (
    SYMBOLS,
    Opcode,
    OpcodeKind,
    opcode_from_token,
)
from opcalc.core.expression_lang.tokenizer import Token, tokenize


class _PrecedenceLevel:
    """One binary-operator level; operands come from the next-higher level."""

    def __init__(self, kinds: Iterable[OpcodeKind], higher: _PrecedenceLevel | None = None) -> None:
        self.kinds = frozenset(kinds)
        self.higher = higher

    def over(self, kinds: Iterable[OpcodeKind]) -> _PrecedenceLevel:
        """Create the next-lower level on top of this one."""
        return _PrecedenceLevel(kinds, self)

    def compile(self, compiler: _Compiler) -> None:
        """operand (op operand)*, folding to the left."""
        self._operand(compiler)
        while compiler.current is not None and compiler.current.kind in self.kinds:
            op_token = compiler.advance()
            self._operand(compiler)
            compiler.emit(opcode_from_token(op_token))

    def _operand(self, compiler: _Compiler) -> None:
        if self.higher is None:
            compiler.compile_primary()
        else:
            self.higher.compile(compiler)


# Bracket levels; each one costs several Python frames in the precedence chain
MAX_NESTING = 64

_EXPRESSION = (
    _PrecedenceLevel([OpcodeKind.POWER])
    .over([OpcodeKind.MULTIPLY, OpcodeKind.DIVIDE])
    .over([OpcodeKind.ADD, OpcodeKind.SUBTRACT])
    .over([OpcodeKind.ASSIGN])
)


def _describe(token: Token) -> str:
    return repr(SYMBOLS.get(token.kind, token.value))


class _Compiler:
    """Pulls tokens one at a time and appends opcodes to ``ops``."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.ops: list[Opcode] = []
        self._tokens = tokenize(source)
        self.depth = 0
        self.current: Token | None = next(self._tokens, None)

    def advance(self) -> Token:
        tok = self.current
        if tok is None:
            raise self.error("Unexpected end of expression")
        self.current = next(self._tokens, None)
        return tok

    def emit(self, opcode: Opcode) -> None:
        self.ops.append(opcode)

    @property
    def position(self) -> int:
        """Offset of the current token, or the end of the source."""
        if self.current is None:
            return len(self.source)
        return self.current.pos

    def error(self, message: str) -> CalculationParseError:
        return CalculationParseError(message, self.source, self.position)

    def compile_expression(self) -> None:
        _EXPRESSION.compile(self)

    def compile_primary(self) -> None:
        """NUMBER | IDENT | '-' NUMBER | '(' expr ')'"""
        tok = self.current
        if tok is None:
            raise self.error("Unexpected end of expression")

        if tok.kind == OpcodeKind.OPEN_BRACKET:
            if self.depth >= MAX_NESTING:
                raise self.error(f"Expression is nested too deeply (limit {MAX_NESTING})")
            self.depth += 1
            self.advance()
            self.compile_expression()
            self.depth -= 1
            if self.current is None or self.current.kind != OpcodeKind.CLOSE_BRACKET:
                raise self.error("Ouch, missing closing bracket")
            self.advance()
            return

        if tok.kind in (OpcodeKind.IDENTIFIER, OpcodeKind.NUMBER):
            self.emit(opcode_from_token(self.advance()))
            return

        # A minus directly before a number is part of the literal
        if tok.kind == OpcodeKind.SUBTRACT:
            self.advance()
            number = self.current
            if number is None or number.kind != OpcodeKind.NUMBER:
                raise self.error("Expected a number after '-'")
            self.advance()
            self.emit(opcode_from_token(Token(OpcodeKind.NUMBER, f"-{number.value}", tok.pos)))
            return

        raise self.error(f"Unexpected token: {_describe(tok)}")


def compile_source(source: str) -> list[Opcode]:
    """Compile an expression string into a postfix opcode list.

    Args:
        source: Expression string (e.g., "a = 2 * (b + 1)")

    Returns:
        Opcodes in execution order.

    Raises:
        CalculationParseError: If the expression is invalid or cannot be tokenized.
    """
    compiler = _Compiler(source)
    compiler.compile_expression()

    # Ensure all tokens consumed
    if compiler.current is not None:
        raise compiler.error(f"Unexpected token after expression: {_describe(compiler.current)}")

    return compiler.ops
