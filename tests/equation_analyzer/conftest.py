"""Shared fixtures and utilities for equation analyzer tests."""

import pytest
from typing import List

import numpy as np

from equation_analyzer import (
    EquationCalculator, EquationCalculatorConfig, EquationPipelineMode, EquationToken, EquationTokenType
)


@pytest.fixture
def calculator():
    """Create a fresh calculator with the default configuration for each test."""
    return EquationCalculator()


@pytest.fixture
def calculator_factory():
    """Factory for calculators with custom configuration."""
    def _create_calculator(
        pipeline: EquationPipelineMode = EquationPipelineMode.VEC,
        max_workers: int | None = None
    ) -> EquationCalculator:
        return EquationCalculator(EquationCalculatorConfig(pipeline=pipeline, max_workers=max_workers))
    return _create_calculator


class EquationTestHelpers:
    """Helper utilities for equation analyzer testing."""

    @staticmethod
    def types(tokens: List[EquationToken]) -> List[EquationTokenType]:
        """Return just the token types of a token sequence."""
        return [token.type for token in tokens]

    @staticmethod
    def assert_close(result: np.float32, expected: float, tolerance: float = 1e-4) -> None:
        """Assert that a binary32 result is within tolerance of the expected value."""
        assert isinstance(result, np.float32), f"Expected np.float32, got {type(result).__name__}"
        assert abs(float(result) - expected) < tolerance, f"Expected {expected!r}, got {result!r}"

    @staticmethod
    def assert_nan(result: np.float32) -> None:
        """Assert that a result is NaN."""
        assert np.isnan(result), f"Expected NaN, got {result!r}"

    @staticmethod
    def number(value: float) -> EquationToken:
        """Build a NUMBER token."""
        return EquationToken(EquationTokenType.NUMBER, np.float32(value))

    @staticmethod
    def x_term(coefficient: float = 1.0, exponent: float = 1.0) -> EquationToken:
        """Build an X token."""
        return EquationToken(EquationTokenType.X, np.float32(coefficient), np.float32(exponent))

    @staticmethod
    def token(token_type: EquationTokenType) -> EquationToken:
        """Build a payload-free token."""
        return EquationToken(token_type)


@pytest.fixture
def helpers():
    """Provide test helper utilities."""
    return EquationTestHelpers
