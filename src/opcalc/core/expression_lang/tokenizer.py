"""
Tokenizer for opcalc expressions.

Converts an expression string into a lazy stream of typed tokens.
"""

from __future__ import annotations

import re
from collections.abc import Iterator

from opcalc.core.errors import CalculationParseError
from opcalc.core.expression_lang.opcodes import SYMBOLS, OpcodeKind


class Token:
    """A single token from the expression tokenizer."""

    __slots__ = ("kind", "value", "pos")

    def __init__(self, kind: OpcodeKind, value: str | None, pos: int) -> None:
        self.kind = kind
        self.value = value
        self.pos = pos

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.value!r}, pos={self.pos})"


def _group_symbols() -> dict[str, tuple[tuple[str, OpcodeKind], ...]]:
    """Operator symbols grouped by their first character."""
    grouped: dict[str, list[tuple[str, OpcodeKind]]] = {}
    for kind, symbol in SYMBOLS.items():
        grouped.setdefault(symbol[0], []).append((symbol, kind))
    return {start: tuple(entries) for start, entries in grouped.items()}


_SYMBOLS_BY_START = _group_symbols()

# Number: no sign, no leading zeros except a lone 0
_NUMBER_RE = re.compile(r"(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")
# Identifier: letter or underscore followed by alphanumerics/underscores
_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

_PATTERNS: tuple[tuple[OpcodeKind, re.Pattern[str]], ...] = (
    (OpcodeKind.NUMBER, _NUMBER_RE),
    (OpcodeKind.IDENTIFIER, _IDENT_RE),
)


def _match_symbol(source: str, i: int) -> tuple[str, OpcodeKind] | None:
    """Longest operator symbol starting at ``i``, if any."""
    best: tuple[str, OpcodeKind] | None = None
    for symbol, kind in _SYMBOLS_BY_START.get(source[i], ()):
        if source.startswith(symbol, i) and (best is None or len(best[0]) < len(symbol)):
            best = (symbol, kind)
    return best


def tokenize(source: str) -> Iterator[Token]:
    """Lazily tokenize an expression string.

    Raises:
        CalculationParseError: On the first character that starts no token.
    """
    i = 0
    n = len(source)

    while i < n:
        c = source[i]

        if c == " ":
            i += 1
            continue

        symbol = _match_symbol(source, i)
        if symbol is not None:
            text, kind = symbol
            yield Token(kind, None, i)
            i += len(text)
            continue

        for kind, pattern in _PATTERNS:
            m = pattern.match(source, i)
            if m:
                yield Token(kind, m.group(0), i)
                i = m.end()
                break
        else:
            raise CalculationParseError(
                f"Found a strange character in the source at {i}: {c}",
                source,
                i,
            )
