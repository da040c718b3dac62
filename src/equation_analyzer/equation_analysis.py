"""Shape analyzers recognising linear and quadratic equations from their tokens."""

from typing import Iterable, List, Sequence, Tuple

import numpy as np

from equation_analyzer.equation_math import F32_NAN
from equation_analyzer.equation_token import EquationToken, EquationTokenType


_RECOGNISED_TYPES = frozenset({
    EquationTokenType.Y,
    EquationTokenType.EQUAL,
    EquationTokenType.NUMBER,
    EquationTokenType.X,
    EquationTokenType.PLUS,
    EquationTokenType.MINUS,
    EquationTokenType.END_INPUT,
})


def _only_recognised(tokens: Sequence[EquationToken]) -> bool:
    return all(token.type in _RECOGNISED_TYPES for token in tokens)


def _count(tokens: Sequence[EquationToken], token_type: EquationTokenType) -> int:
    return sum(1 for token in tokens if token.type == token_type)


def _non_unit_powers(tokens: Sequence[EquationToken]) -> int:
    """Count tokens raising something to a power other than 1."""
    return sum(
        1 for token in tokens
        if token.type == EquationTokenType.POWER or (token.type == EquationTokenType.X and token.n2 != 1)
    )


def _body(tokens: Sequence[EquationToken]) -> List[EquationToken]:
    return [token for token in tokens if token.type != EquationTokenType.END_INPUT]


def _leading_envelope(body: Sequence[EquationToken]) -> bool:
    return len(body) >= 2 and body[0].type == EquationTokenType.Y and body[1].type == EquationTokenType.EQUAL


def _trailing_envelope(body: Sequence[EquationToken]) -> bool:
    return len(body) >= 2 and body[-2].type == EquationTokenType.EQUAL and body[-1].type == EquationTokenType.Y


def _has_single_envelope(tokens: Sequence[EquationToken]) -> bool:
    return _count(tokens, EquationTokenType.Y) == 1 and _count(tokens, EquationTokenType.EQUAL) == 1


def _signed_terms(tokens: Iterable[EquationToken]) -> List[Tuple[EquationToken, np.float32]]:
    """Pair each NUMBER and X token with its value, negated after a MINUS."""
    terms = []
    previous_type = None
    for token in tokens:
        if token.type in (EquationTokenType.NUMBER, EquationTokenType.X):
            value = np.float32(token.n1)
            if previous_type == EquationTokenType.MINUS:
                value = -value

            terms.append((token, value))

        previous_type = token.type

    return terms


def detect_linear(tokens: Iterable[EquationToken]) -> bool:
    """
    Check whether tokens describe a line such as `y = mx + b` or `mx + b = y`.

    Args:
        tokens: Tokenizer output including the END_INPUT marker

    Returns:
        True if the equation has a linear shape
    """
    tokens = list(tokens)
    if not 4 <= len(tokens) <= 6:
        return False

    if not _only_recognised(tokens) or not _has_single_envelope(tokens):
        return False

    body = _body(tokens)
    if not (_leading_envelope(body) or _trailing_envelope(body)):
        return False

    return _non_unit_powers(tokens) == 0 and _count(tokens, EquationTokenType.X) <= 1


def linear_coeffs(tokens: Iterable[EquationToken]) -> Tuple[np.float32, np.float32]:
    """
    Extract slope and intercept from a linear equation's tokens.

    Returns:
        (m, b); m is 0 when no x term is present
    """
    m = np.float32(0.0)
    b = np.float32(0.0)
    for token, value in _signed_terms(tokens):
        if token.type == EquationTokenType.X:
            m = value

        else:
            b = value

    return m, b


def linear_zero(tokens: Iterable[EquationToken]) -> np.float32:
    """Return the x where the line crosses zero, or NaN for a horizontal line."""
    m, b = linear_coeffs(tokens)
    if m == 0:
        return F32_NAN

    with np.errstate(all="ignore"):
        return -b / m


def detect_quadratic(tokens: Iterable[EquationToken]) -> bool:
    """
    Check whether tokens describe a parabola such as `y = ax^2 + bx + c`.

    Args:
        tokens: Tokenizer output including the END_INPUT marker

    Returns:
        True if the equation has a quadratic shape
    """
    tokens = list(tokens)
    if not 4 <= len(tokens) <= 8:
        return False

    if not any(token.type == EquationTokenType.X and token.n2 == 2 for token in tokens):
        return False

    if not _only_recognised(tokens) or not _has_single_envelope(tokens):
        return False

    if not _leading_envelope(_body(tokens)):
        return False

    return _non_unit_powers(tokens) == 1 and _count(tokens, EquationTokenType.X) in (1, 2)


def quadratic_coeffs(tokens: Iterable[EquationToken]) -> Tuple[np.float32, np.float32, np.float32]:
    """
    Extract (a, b, c) from a quadratic equation's tokens.

    Missing terms are 0.
    """
    a = np.float32(0.0)
    b = np.float32(0.0)
    c = np.float32(0.0)
    for token, value in _signed_terms(tokens):
        if token.type == EquationTokenType.NUMBER:
            c = value

        elif token.n2 == 2:
            a = value

        else:
            b = value

    return a, b, c
