"""
opcalc CLI - Entry point.

Commands:
- eval: compile and run one expression
- dump: show the opcodes an expression compiles to
- repl: evaluate expressions line by line against one register store
"""

from __future__ import annotations

import logging
import platform
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from opcalc._version import get_version
from opcalc.core.api import PublicContext, PublicProgram, new_program
from opcalc.core.config import CalculatorConfig, load_config
from opcalc.core.errors import CalculationError
from opcalc.core.expression_lang.opcodes import format_number

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="opcalc - compile, run, and constant-fold arithmetic expressions",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"opcalc {get_version()}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """opcalc - compile, run, and constant-fold arithmetic expressions."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _print_error(error: CalculationError) -> None:
    err_console.print(f"[red]Error:[/red] {escape(str(error))}")


def _parse_assignments(assignments: list[str]) -> dict[str, float]:
    """Turn NAME=VALUE strings into register values."""
    registers: dict[str, float] = {}
    for item in assignments:
        name, sep, raw = item.partition("=")
        name = name.strip()
        if not sep or not name:
            raise typer.BadParameter(f"Expected NAME=VALUE, got {item!r}", param_hint="--set")
        try:
            registers[name] = float(raw)
        except ValueError:
            raise typer.BadParameter(f"Not a number: {raw!r}", param_hint="--set") from None
    return registers


def _load_config_or_exit(config_path: Path | None) -> CalculatorConfig:
    try:
        return load_config(config_path)
    except CalculationError as e:
        _print_error(e)
        raise typer.Exit(code=1) from e


def _compile(source: str, optimize: bool) -> PublicProgram:
    logger.debug("Compiling %r (optimize=%s)", source, optimize)
    program = new_program(source)
    if optimize:
        program = program.optimize()
    return program


@app.command("eval")
def eval_command(
    expression: str = typer.Argument(..., help="Expression to evaluate, e.g. 'a = 2 ** 10'"),
    assignments: list[str] = typer.Option(
        [], "--set", "-s", help="Set a register before evaluating (NAME=VALUE)"
    ),
    optimize: bool | None = typer.Option(
        None,
        "--optimize/--no-optimize",
        help="Constant-fold before executing (default from opcalc.toml)",
    ),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to opcalc.toml"),
) -> None:
    """Evaluate a single expression and print the result."""
    config = _load_config_or_exit(config_path)
    context = PublicContext(config.new_context())
    context.set_registers(_parse_assignments(assignments))

    try:
        program = _compile(expression, config.optimize if optimize is None else optimize)
        result = program.execute(context)
    except CalculationError as e:
        _print_error(e)
        raise typer.Exit(code=1) from e

    console.print(format_number(result))


@app.command("dump")
def dump_command(
    expression: str = typer.Argument(..., help="Expression to compile"),
    optimize: bool = typer.Option(False, "--optimize", "-O", help="Show the optimized program"),
) -> None:
    """Print the opcodes an expression compiles to."""
    try:
        program = _compile(expression, optimize)
    except CalculationError as e:
        _print_error(e)
        raise typer.Exit(code=1) from e

    console.print(escape(str(program)))
    console.print(f"[dim]{program.num_opcodes} opcode(s)[/dim]")


def _print_registers(context: PublicContext) -> None:
    registers = context.registers
    if not registers:
        console.print("[dim]No registers set[/dim]")
        return
    table = Table(title="Registers")
    table.add_column("Name", style="cyan")
    table.add_column("Value", justify="right")
    for name in sorted(registers):
        table.add_row(name, format_number(registers[name]))
    console.print(table)


@app.command("repl")
def repl_command(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to opcalc.toml"),
) -> None:
    """Evaluate expressions interactively against one register store.

    Each result is stored in the ``last`` register (configurable).
    Type :regs to list registers, :clear to reset them, :quit to exit.
    """
    config = _load_config_or_exit(config_path)
    context = PublicContext(config.new_context())

    while True:
        try:
            line = console.input("[bold]>[/bold] ").strip()
        except EOFError:
            break

        if not line:
            continue
        if line == ":quit":
            break
        if line == ":regs":
            _print_registers(context)
            continue
        if line == ":clear":
            context.clear_registers()
            continue

        try:
            result = _compile(line, config.optimize).execute(context)
        except CalculationError as e:
            _print_error(e)
            continue

        context.set_register(config.last_register, result)
        console.print(format_number(result))


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


if __name__ == "__main__":
    main()
