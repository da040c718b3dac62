"""Tokenizer for equations with detailed error messages."""

import difflib
from collections import deque
from typing import Deque, Iterator, List

import numpy as np

from equation_analyzer.equation_error import EquationErrorKind, EquationTokenError
from equation_analyzer.equation_token import (
    EquationToken, EquationTokenType, FUNCTION_NAMES, OPERAND_ENDING_TYPES
)


_WHITESPACE = " \t\r\n"

_SINGLE_CHAR_TOKENS = {
    'y': EquationTokenType.Y,
    '=': EquationTokenType.EQUAL,
    ',': EquationTokenType.COMMA,
    '(': EquationTokenType.OPEN_PAREN,
    ')': EquationTokenType.CLOSE_PAREN,
    '^': EquationTokenType.POWER,
    '!': EquationTokenType.FACTORIAL,
    '+': EquationTokenType.PLUS,
    '*': EquationTokenType.STAR,
    '/': EquationTokenType.SLASH,
    'π': EquationTokenType.PI,
    'e': EquationTokenType.E,
}

# Operators after which `-(` or `-func(` must negate only the group that follows
_TIGHT_LEFT_OPERATORS = frozenset({
    EquationTokenType.POWER,
    EquationTokenType.SLASH,
    EquationTokenType.MODULO,
    EquationTokenType.PERCENT,
})

# Negated constants, keyed on the character following the minus sign
_NEGATED_CONSTANTS = {
    'e': (EquationTokenType.E, EquationTokenType.NEG_E),
    'π': (EquationTokenType.PI, EquationTokenType.NEG_PI),
}


def _is_digit(c: str) -> bool:
    return '0' <= c <= '9' if c else False


class EquationTokenizer:
    """
    Streaming tokenizer for equations.

    Iterating the tokenizer scans the source on demand, yielding one token per
    call and finishing with exactly one END_INPUT token.  A small queue holds
    tokens synthesized from a single lexeme (for example `-(` becomes
    NUMBER(-1) followed by STAR) until they are pulled.
    """

    def __init__(self, expression: str) -> None:
        """
        Initialize the tokenizer.

        Args:
            expression: The equation source text

        Raises:
            EquationTokenError: If the expression is empty
        """
        if not expression:
            raise EquationTokenError(
                EquationErrorKind.EMPTY_INPUT,
                message="Empty equation",
                expected="A mathematical expression",
                example="2 + 2 or y = 3x^2 - 1",
                suggestion="Provide an expression to evaluate"
            )

        self._expression = expression
        self._pos = 0
        self._previous_type: EquationTokenType | None = None
        self._pending: Deque[EquationToken] = deque()
        self._finished = False

    def __iter__(self) -> Iterator[EquationToken]:
        return self

    def __next__(self) -> EquationToken:
        if self._pending:
            token = self._pending.popleft()

        else:
            scanned = self._scan_token()
            if scanned is None:
                raise StopIteration

            token = scanned

        self._previous_type = token.type
        return token

    def _at_end(self) -> bool:
        return self._pos >= len(self._expression)

    def _peek(self, distance: int = 0) -> str:
        """Return the character `distance` ahead, or '' past the end."""
        index = self._pos + distance
        if index >= len(self._expression):
            return ''

        return self._expression[index]

    def _advance(self) -> str:
        c = self._expression[self._pos]
        self._pos += 1
        return c

    def _skip_whitespace(self) -> None:
        while not self._at_end() and self._peek() in _WHITESPACE:
            self._pos += 1

    def _scan_token(self) -> EquationToken | None:
        self._skip_whitespace()

        if self._at_end():
            if self._finished:
                return None

            self._finished = True
            return EquationToken(EquationTokenType.END_INPUT, position=self._pos)

        start = self._pos
        c = self._advance()

        simple_type = _SINGLE_CHAR_TOKENS.get(c)
        if simple_type is not None:
            return EquationToken(simple_type, position=start)

        if c == '%':
            if self._peek() == '%':
                self._advance()
                return EquationToken(EquationTokenType.MODULO, position=start)

            return EquationToken(EquationTokenType.PERCENT, position=start)

        if c == '-':
            return self._scan_minus(start)

        if c == 'x':
            return self._scan_x(np.float32(1.0), start)

        if _is_digit(c):
            self._pos = start
            return self._scan_operand(start, negate=False)

        if c.isascii() and c.isalpha():
            self._pos = start
            return self._scan_function(start)

        raise EquationTokenError(
            EquationErrorKind.BAD_CHAR,
            message=f"Invalid character: {c}",
            position=start,
            received=f"Character: {c} (code {ord(c)})",
            expected="Digits, x, y, π, e, operators (+ - * / ^ % %% !), parentheses or a function name",
            example="Valid: 2 * (x + 1), sqrt(16), log_2(8)",
            suggestion=f"Remove '{c}' from the expression"
        )

    def _scan_digits(self) -> str:
        """Scan `[0-9_]+(\\.[0-9]+)?` starting at the current position."""
        start = self._pos
        while _is_digit(self._peek()) or self._peek() == '_':
            self._pos += 1

        if self._peek() == '.' and _is_digit(self._peek(1)):
            self._pos += 1
            while _is_digit(self._peek()):
                self._pos += 1

        return self._expression[start:self._pos]

    def _to_f32(self, literal: str, start: int) -> np.float32:
        try:
            return np.float32(literal.replace('_', ''))

        except ValueError as e:
            raise EquationTokenError(
                EquationErrorKind.BAD_NUMBER,
                message=f"Invalid number: {literal}",
                position=start,
                received=f"Number: {literal}",
                expected="Digits with an optional fractional part",
                example="Valid: 42, 3.14, 1_000"
            ) from e

    def _followed_by_tighter_operator(self) -> bool:
        """Return True if the next non-blank character binds tighter than negation."""
        index = self._pos
        while index < len(self._expression) and self._expression[index] in _WHITESPACE:
            index += 1

        return index < len(self._expression) and self._expression[index] in "^!"

    def _scan_operand(self, start: int, negate: bool) -> EquationToken:
        """
        Scan a number, or a coefficient immediately followed by x.

        With `negate` set the sign is folded into the value unless a tighter
        binding operator follows, in which case UNARY_MINUS is returned and the
        unsigned operand is queued behind it.
        """
        digits_start = self._pos
        literal = self._scan_digits()
        value = self._to_f32(literal, digits_start)

        if self._peek() == 'x':
            self._advance()
            operand = self._scan_x(value, start)

        else:
            operand = EquationToken(EquationTokenType.NUMBER, value, position=start)

        if not negate:
            return operand

        return self._negate(operand, start)

    def _negate(self, operand: EquationToken, start: int) -> EquationToken:
        if self._followed_by_tighter_operator():
            self._pending.append(operand)
            return EquationToken(EquationTokenType.UNARY_MINUS, position=start)

        operand.n1 = -operand.n1
        return operand

    def _scan_x(self, coefficient: np.float32, start: int) -> EquationToken:
        exponent = np.float32(1.0)
        if self._peek() == '^':
            exponent = self._scan_exponent()

        return EquationToken(EquationTokenType.X, coefficient, exponent, position=start)

    def _scan_exponent(self) -> np.float32:
        """Scan `^<digits>` or `^(<digits>[/<digits>])` following an x."""
        power_pos = self._pos
        self._advance()

        if _is_digit(self._peek()):
            return self._to_f32(self._scan_digits(), power_pos + 1)

        if self._peek() == '(' and _is_digit(self._peek(1)):
            self._advance()
            numerator = self._to_f32(self._scan_digits(), power_pos + 2)
            denominator = np.float32(1.0)

            if self._peek() == '/':
                self._advance()
                if not _is_digit(self._peek()):
                    raise self._bad_power(power_pos)

                denominator_pos = self._pos
                denominator = self._to_f32(self._scan_digits(), denominator_pos)

            if self._peek() != ')':
                raise self._bad_power(power_pos)

            self._advance()
            with np.errstate(all="ignore"):
                return np.float32(numerator / denominator)

        raise self._bad_power(power_pos)

    def _bad_power(self, position: int) -> EquationTokenError:
        return EquationTokenError(
            EquationErrorKind.BAD_POWER,
            message="Invalid power of x",
            position=position,
            received=f"Found: {self._expression[position:position + 8]}",
            expected="^ followed by digits, or by a parenthesized integer or fraction",
            example="Valid: x^2, x^(3), x^(1/2)"
        )

    def _scan_minus(self, start: int) -> EquationToken:
        if self._previous_type in OPERAND_ENDING_TYPES:
            return EquationToken(EquationTokenType.MINUS, position=start)

        self._skip_whitespace()
        next_char = self._peek()

        constants = _NEGATED_CONSTANTS.get(next_char)
        if constants is not None:
            self._advance()
            plain_type, negated_type = constants
            if self._followed_by_tighter_operator():
                self._pending.append(EquationToken(plain_type, position=self._pos - 1))
                return EquationToken(EquationTokenType.UNARY_MINUS, position=start)

            return EquationToken(negated_type, position=start)

        if _is_digit(next_char):
            return self._scan_operand(start, negate=True)

        if next_char == 'x':
            self._advance()
            return self._negate(self._scan_x(np.float32(1.0), start), start)

        if next_char in ('(', '-') or (next_char.isascii() and next_char.isalpha()):
            if self._previous_type in _TIGHT_LEFT_OPERATORS:
                return EquationToken(EquationTokenType.UNARY_MINUS, position=start)

            self._pending.append(EquationToken(EquationTokenType.STAR, position=start))
            return EquationToken(EquationTokenType.NUMBER, np.float32(-1.0), position=start)

        raise EquationTokenError(
            EquationErrorKind.BAD_CHAR,
            message="Invalid minus sign",
            position=start,
            received=f"Found: -{next_char}" if next_char else "Found: - at end of input",
            expected="A number, x, π, e, '(' or a function after a negative sign",
            example="Valid: -2, -x, -(1 + 2), -sin(x)"
        )

    def _scan_function(self, start: int) -> EquationToken:
        while self._peek().isascii() and self._peek().isalpha():
            self._pos += 1

        name = self._expression[start:self._pos]

        if name == "log":
            return self._scan_log(start)

        token_type = FUNCTION_NAMES.get(name)
        if token_type is None:
            similar = difflib.get_close_matches(name, list(FUNCTION_NAMES) + ["log"], n=3, cutoff=0.6)
            suggestion = f"Did you mean: {', '.join(similar)}?" if similar else None
            raise EquationTokenError(
                EquationErrorKind.BAD_FUNCTION,
                message=f"Invalid function name {name}",
                position=start,
                received=f"Identifier: {name}",
                expected="sin, cos, tan, asin, acos, atan, abs, sqrt, ln, log_<base>, min, max, avg, med, mode or ch",
                suggestion=suggestion
            )

        if self._peek() != '(':
            raise EquationTokenError(
                EquationErrorKind.BAD_FUNCTION,
                message=f"Function {name} must be followed by '('",
                position=start,
                received=f"Found: {name}{self._peek()}",
                expected=f"{name}(",
                example=f"{name}(1)"
            )

        self._advance()
        return EquationToken(token_type, position=start)

    def _scan_log(self, start: int) -> EquationToken:
        if self._peek() != '_' or not _is_digit(self._peek(1)):
            raise self._bad_log_base(start)

        self._advance()
        base = self._to_f32(self._scan_digits(), start + 4)

        if self._peek() != '(':
            raise self._bad_log_base(start)

        self._advance()
        return EquationToken(EquationTokenType.LOG, base, position=start)

    def _bad_log_base(self, start: int) -> EquationTokenError:
        return EquationTokenError(
            EquationErrorKind.BAD_LOG_BASE,
            message="Invalid use of log",
            position=start,
            received=f"Found: {self._expression[start:self._pos + 1]}",
            expected="log_<base>( with a numeric base",
            example="log_10(100), log_2(8)",
            suggestion="Use ln( for the natural logarithm"
        )


def tokens(expression: str) -> EquationTokenizer:
    """Return a streaming token iterator over the expression."""
    return EquationTokenizer(expression)


def tokens_vec(expression: str) -> List[EquationToken]:
    """
    Tokenize the whole expression eagerly.

    Args:
        expression: The equation source text

    Returns:
        List of tokens, terminated by END_INPUT

    Raises:
        EquationTokenError: If tokenization fails
    """
    return list(EquationTokenizer(expression))
