"""
opcalc expression language.

Tokenizer, precedence-climbing compiler, stack-machine opcodes, and the
constant-folding optimizer.

Usage:
    from opcalc.core.expression_lang import Program, new_context

    context = new_context()
    Program("a = 2 + 3").execute(context)
    # context.get_register("a") == 5.0
    Program("a * 2").optimize().execute(context)
    # 10.0
"""

from opcalc.core.expression_lang.compiler import compile_source
from opcalc.core.expression_lang.context import ExecutionContext, new_context
from opcalc.core.expression_lang.opcodes import Opcode, OpcodeKind
from opcalc.core.expression_lang.program import Program, new_program
from opcalc.core.expression_lang.tokenizer import Token, tokenize

__all__ = [
    "ExecutionContext",
    "Opcode",
    "OpcodeKind",
    "Program",
    "Token",
    "compile_source",
    "new_context",
    "new_program",
    "tokenize",
]
