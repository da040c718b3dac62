"""Numeric helpers for binary32 arithmetic."""

import math
from typing import Tuple

import numpy as np


F32_PI = np.float32(np.pi)
F32_E = np.float32(np.e)
F32_NAN = np.float32(np.nan)
F32_INF = np.float32(np.inf)

_F32_MAX = int(np.finfo(np.float32).max)

# 34! still fits in a binary32, 35! does not
_MAX_FINITE_FACTORIAL = 34


def int_to_f32(value: int) -> np.float32:
    """Convert an exact integer to binary32, saturating to +inf."""
    if value > _F32_MAX:
        return F32_INF

    return np.float32(float(value))


def is_non_negative_integer(value: np.float32) -> bool:
    """Return True if the value is finite, non-negative and has no fractional part."""
    with np.errstate(all="ignore"):
        return bool(value >= 0 and np.fmod(value, np.float32(1.0)) == 0)


def factorial(n: int) -> int:
    """Exact integer factorial."""
    return math.factorial(n)


def factorial_f32(n: int) -> np.float32:
    """
    Compute n! rounded to binary32.

    Args:
        n: Non-negative integer

    Returns:
        n! as binary32, or +inf once it no longer fits
    """
    if n > _MAX_FINITE_FACTORIAL:
        return F32_INF

    return int_to_f32(factorial(n))


def binomial(n: int, k: int) -> np.float32:
    """
    Compute the binomial coefficient n! / (k! * (n - k)!) as binary32.

    Returns 0 when k > n.  The exact product is built up one term at a time
    so that huge arguments saturate to +inf without computing huge factorials.
    """
    if k > n:
        return np.float32(0.0)

    k = min(k, n - k)
    result = 1
    for i in range(1, k + 1):
        result = result * (n - k + i) // i
        if result > _F32_MAX:
            return F32_INF

    return int_to_f32(result)


def quadratic_roots(a: np.float32, b: np.float32, c: np.float32) -> Tuple[np.float32, ...]:
    """
    Find the real roots of a*x^2 + b*x + c = 0 in binary32.

    Args:
        a: Coefficient of x^2
        b: Coefficient of x
        c: Constant term

    Returns:
        Empty tuple for a negative discriminant, one root when it is zero,
        otherwise the two roots (+sqrt first).  With a == 0 the equation is
        linear: one root when b != 0, none otherwise.
    """
    a, b, c = np.float32(a), np.float32(b), np.float32(c)
    with np.errstate(all="ignore"):
        if a == 0:
            return () if b == 0 else (-c / b,)

        discriminant = b * b - np.float32(4.0) * a * c
        if discriminant < 0:
            return ()

        two_a = np.float32(2.0) * a
        if discriminant == 0:
            return (-b / two_a,)

        root = np.sqrt(discriminant)
        return ((-b + root) / two_a, (-b - root) / two_a)
