"""Token types, token representation and operator table for equations."""

from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from equation_analyzer.equation_error import EquationErrorKind, EquationParseError


class EquationTokenType(Enum):
    """Token types for equations."""
    Y = "y"
    EQUAL = "="
    COMMA = ","
    OPEN_PAREN = "("
    CLOSE_PAREN = ")"
    END_INPUT = "END_INPUT"

    # Operands
    NUMBER = "NUMBER"
    X = "x"
    PI = "π"
    E = "e"
    NEG_PI = "-π"
    NEG_E = "-e"

    # Operators
    PLUS = "+"
    MINUS = "-"
    UNARY_MINUS = "neg"
    STAR = "*"
    SLASH = "/"
    POWER = "^"
    MODULO = "%%"
    PERCENT = "%"
    FACTORIAL = "!"

    # Unary functions
    SIN = "sin("
    COS = "cos("
    TAN = "tan("
    ASIN = "asin("
    ACOS = "acos("
    ATAN = "atan("
    ABS = "abs("
    SQRT = "sqrt("
    LN = "ln("
    LOG = "log_("

    # Variadic functions
    MIN = "min("
    MAX = "max("
    AVG = "avg("
    MED = "med("
    MODE = "mode("
    CHOICE = "ch("

    # Synthetic markers, only ever produced by the parser
    END_MIN = "END_MIN"
    END_MAX = "END_MAX"
    END_AVG = "END_AVG"
    END_MED = "END_MED"
    END_MODE = "END_MODE"
    END_CHOICE = "END_CHOICE"


class Assoc(Enum):
    """Operator associativity."""
    LEFT = "left"
    RIGHT = "right"


@dataclass
class EquationToken:
    """
    A single token in an equation.

    The meaning of the two numeric payloads depends on the token type:
    NUMBER stores its value in n1, X stores coefficient (n1) and exponent (n2),
    LOG stores its base in n1.  Every other type ignores them.
    """
    type: EquationTokenType
    n1: np.float32 = field(default_factory=lambda: np.float32(0.0))
    n2: np.float32 = field(default_factory=lambda: np.float32(0.0))
    position: int = field(default=0, compare=False)

    def __repr__(self) -> str:
        if self.type == EquationTokenType.X:
            return f"EquationToken(X, {self.n1}x^{self.n2}, pos={self.position})"

        if self.type in (EquationTokenType.NUMBER, EquationTokenType.LOG):
            return f"EquationToken({self.type.name}, {self.n1}, pos={self.position})"

        return f"EquationToken({self.type.name}, pos={self.position})"


@dataclass(frozen=True)
class EquationOperand:
    """Shunting-Yard metadata for an operator or function token."""
    token: EquationToken
    prec: int
    assoc: Assoc
    is_func: bool
    paren_opener: bool


UNARY_FUNCTIONS = frozenset({
    EquationTokenType.SIN,
    EquationTokenType.COS,
    EquationTokenType.TAN,
    EquationTokenType.ASIN,
    EquationTokenType.ACOS,
    EquationTokenType.ATAN,
    EquationTokenType.ABS,
    EquationTokenType.SQRT,
    EquationTokenType.LN,
    EquationTokenType.LOG,
})

VARIADIC_FUNCTIONS = frozenset({
    EquationTokenType.MIN,
    EquationTokenType.MAX,
    EquationTokenType.AVG,
    EquationTokenType.MED,
    EquationTokenType.MODE,
    EquationTokenType.CHOICE,
})

SYNTHETIC_TYPES = frozenset({
    EquationTokenType.END_MIN,
    EquationTokenType.END_MAX,
    EquationTokenType.END_AVG,
    EquationTokenType.END_MED,
    EquationTokenType.END_MODE,
    EquationTokenType.END_CHOICE,
})

CONSTANT_TYPES = frozenset({
    EquationTokenType.PI,
    EquationTokenType.E,
    EquationTokenType.NEG_PI,
    EquationTokenType.NEG_E,
})

SCALAR_TYPES = frozenset({EquationTokenType.NUMBER, EquationTokenType.X})

# Binary and postfix operators subject to precedence climbing
INFIX_OPERATORS = frozenset({
    EquationTokenType.PLUS,
    EquationTokenType.MINUS,
    EquationTokenType.UNARY_MINUS,
    EquationTokenType.STAR,
    EquationTokenType.SLASH,
    EquationTokenType.POWER,
    EquationTokenType.MODULO,
    EquationTokenType.PERCENT,
    EquationTokenType.FACTORIAL,
})

# A minus sign following one of these is binary subtraction
OPERAND_ENDING_TYPES = frozenset({
    EquationTokenType.E,
    EquationTokenType.PI,
    EquationTokenType.NUMBER,
    EquationTokenType.CLOSE_PAREN,
    EquationTokenType.X,
    EquationTokenType.FACTORIAL,
})

FUNCTION_NAMES = {
    "sin": EquationTokenType.SIN,
    "cos": EquationTokenType.COS,
    "tan": EquationTokenType.TAN,
    "asin": EquationTokenType.ASIN,
    "acos": EquationTokenType.ACOS,
    "atan": EquationTokenType.ATAN,
    "abs": EquationTokenType.ABS,
    "sqrt": EquationTokenType.SQRT,
    "ln": EquationTokenType.LN,
    "min": EquationTokenType.MIN,
    "max": EquationTokenType.MAX,
    "avg": EquationTokenType.AVG,
    "med": EquationTokenType.MED,
    "mode": EquationTokenType.MODE,
    "ch": EquationTokenType.CHOICE,
}

_VARIADIC_ENDS = {
    EquationTokenType.MIN: EquationTokenType.END_MIN,
    EquationTokenType.MAX: EquationTokenType.END_MAX,
    EquationTokenType.AVG: EquationTokenType.END_AVG,
    EquationTokenType.MED: EquationTokenType.END_MED,
    EquationTokenType.MODE: EquationTokenType.END_MODE,
    EquationTokenType.CHOICE: EquationTokenType.END_CHOICE,
}

# (prec, assoc, is_func, paren_opener)
_OPERATOR_TABLE = {
    EquationTokenType.OPEN_PAREN: (0, Assoc.RIGHT, False, True),
    EquationTokenType.FACTORIAL: (5, Assoc.LEFT, False, False),
    EquationTokenType.POWER: (4, Assoc.RIGHT, False, False),
    EquationTokenType.UNARY_MINUS: (4, Assoc.RIGHT, False, False),
    EquationTokenType.STAR: (3, Assoc.LEFT, False, False),
    EquationTokenType.SLASH: (3, Assoc.LEFT, False, False),
    EquationTokenType.MODULO: (3, Assoc.LEFT, False, False),
    EquationTokenType.PERCENT: (3, Assoc.LEFT, False, False),
    EquationTokenType.PLUS: (2, Assoc.LEFT, False, False),
    EquationTokenType.MINUS: (2, Assoc.LEFT, False, False),
}

for _function_type in UNARY_FUNCTIONS | VARIADIC_FUNCTIONS:
    _OPERATOR_TABLE[_function_type] = (0, Assoc.RIGHT, True, True)


def operand_for(token: EquationToken) -> EquationOperand:
    """
    Look up the Shunting-Yard record for an operator or function token.

    Args:
        token: Operator, function or open paren token

    Returns:
        Operand record wrapping the token

    Raises:
        EquationParseError: If the token is not an operator or function
    """
    entry = _OPERATOR_TABLE.get(token.type)
    if entry is None:
        raise EquationParseError(
            EquationErrorKind.UNKNOWN_OPERATOR,
            message=f"Unknown operator: {token.type.name}",
            position=token.position,
            received=f"Token: {token.type.name}",
            expected="An operator, a function or '('",
            context="Only operators and functions have precedence and associativity"
        )

    prec, assoc, is_func, paren_opener = entry
    return EquationOperand(token, prec, assoc, is_func, paren_opener)


def is_variadic(token_type: EquationTokenType) -> bool:
    """Return True if the token type opens a variadic function call."""
    return token_type in VARIADIC_FUNCTIONS


def variadic_end(token_type: EquationTokenType) -> EquationTokenType:
    """
    Map a variadic opener to the synthetic marker that closes it in RPN.

    Raises:
        EquationParseError: If the token type is not a variadic opener
    """
    end_type = _VARIADIC_ENDS.get(token_type)
    if end_type is None:
        raise EquationParseError(
            EquationErrorKind.UNKNOWN_OPERATOR,
            message=f"Not a variadic function: {token_type.name}",
            expected="One of min, max, avg, med, mode, ch"
        )

    return end_type
