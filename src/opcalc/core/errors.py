"""
Error types for opcalc compilation, execution, and configuration.
"""

from dataclasses import dataclass


class CalculationError(Exception):
    """Base exception for all opcalc errors."""

    def __init__(self, message: str, context: "SourceContext | None" = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.message}\n{self.context.format()}"
        return self.message


class CalculationParseError(CalculationError):
    """
    Raised when an expression cannot be compiled.

    Examples:
    - Unrecognized character in the source
    - Missing closing bracket
    - Operator where an operand is expected
    - Trailing tokens after a complete expression

    Attributes:
        buffer: The full source text being compiled
        offset: Offset of the offending character or token
    """

    def __init__(self, message: str, buffer: str | None = None, offset: int | None = None):
        self.buffer = buffer
        self.offset = offset
        context = None
        if buffer is not None and offset is not None:
            context = SourceContext(buffer=buffer, offset=offset)
        super().__init__(message, context)


class CalculationRuntimeError(CalculationError):
    """
    Raised when a compiled program fails during execution.

    Examples:
    - Assignment to something that is not a variable
    - Stack underflow on a malformed opcode sequence
    - Executing a structural opcode such as a bracket
    """

    pass


class ConfigError(CalculationError):
    """
    Raised when an opcalc.toml file cannot be used.

    Examples:
    - Malformed TOML
    - Non-numeric default register value
    """

    pass


@dataclass
class SourceContext:
    """
    Location of an error inside a single-line expression.

    Attributes:
        buffer: The full expression source
        offset: Zero-based offset of the error
    """

    buffer: str
    offset: int

    def format(self) -> str:
        """
        Format the source with a marker under the error position.

        Returns:
            Two lines: the source, then a caret under ``offset``.
        """
        return f"  {self.buffer}\n  {' ' * self.offset}^"
