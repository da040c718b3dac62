"""Exception classes for equation analysis with detailed context."""

from enum import Enum
from typing import Optional


class EquationErrorKind(Enum):
    """Flat set of failure kinds raised by the equation pipeline."""
    # Tokenizer
    EMPTY_INPUT = "empty input"
    BAD_CHAR = "bad character"
    BAD_NUMBER = "bad number"
    BAD_FUNCTION = "bad function"
    BAD_LOG_BASE = "bad log base"
    BAD_POWER = "bad power"

    # Parser
    UNMATCHED_CLOSE = "unmatched close paren"
    UNMATCHED_OPEN = "unmatched open paren"
    NO_END_MARKER = "no end marker"
    VARIADIC_ARGS_NOT_SCALAR = "variadic args not scalar"
    SYNTHETIC_LEAKED = "synthetic token leaked"
    UNKNOWN_OPERATOR = "unknown operator"

    # Evaluator
    UNDERFLOW = "stack underflow"
    FACTORIAL_DOMAIN = "factorial domain"
    CHOICE_DOMAIN = "choice domain"
    UNBALANCED = "unbalanced expression"
    INVALID_EQUATION = "invalid equation"
    INVALID_VARIADIC_PARAM = "invalid variadic param"
    VARIADIC_ARITY = "variadic arity"
    UNKNOWN_TOKEN = "unknown token"

    # Facade
    INVALID_RANGE = "invalid range"


class EquationError(Exception):
    """Base exception for equation errors with detailed context information."""

    def __init__(
        self,
        kind: EquationErrorKind,
        message: str,
        context: Optional[str] = None,
        expected: Optional[str] = None,
        received: Optional[str] = None,
        suggestion: Optional[str] = None,
        example: Optional[str] = None,
        position: Optional[int] = None
    ):
        """
        Initialize detailed error.

        Args:
            kind: Which failure this is
            message: Core error description
            context: Additional context information
            expected: What was expected
            received: What was actually received
            suggestion: Suggestion for fixing the error
            example: Example of correct usage
            position: Character position where error occurred
        """
        self.kind = kind
        self.message = message
        self.context = context
        self.expected = expected
        self.received = received
        self.suggestion = suggestion
        self.example = example
        self.position = position

        super().__init__(self._format_detailed_message())

    def _format_detailed_message(self) -> str:
        """Format the error message with all available details."""
        parts = [f"Error: {self.message}"]

        if self.position is not None:
            parts.append(f"Position: {self.position}")

        if self.received:
            parts.append(f"Received: {self.received}")

        if self.expected:
            parts.append(f"Expected: {self.expected}")

        if self.context:
            parts.append(f"Context: {self.context}")

        if self.suggestion:
            parts.append(f"Suggestion: {self.suggestion}")

        if self.example:
            parts.append(f"Example: {self.example}")

        return "\n".join(parts)


class EquationTokenError(EquationError):
    """Tokenization errors with detailed context."""


class EquationParseError(EquationError):
    """Parsing errors with detailed context."""


class EquationEvalError(EquationError):
    """Evaluation errors with detailed context."""
