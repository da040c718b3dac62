"""Calculator façade chaining the tokenizer, parser and evaluator."""

import logging
from dataclasses import dataclass, field
from typing import List

import numpy as np

from equation_analyzer.equation_analysis import (
    detect_linear, detect_quadratic, linear_zero, quadratic_coeffs
)
from equation_analyzer.equation_config import EquationCalculatorConfig, EquationPipelineMode
from equation_analyzer.equation_error import EquationError, EquationErrorKind, EquationEvalError
from equation_analyzer.equation_evaluator import EquationEvaluator
from equation_analyzer.equation_math import quadratic_roots
from equation_analyzer.equation_parallel import parallel_map
from equation_analyzer.equation_parser import EquationParser, parse
from equation_analyzer.equation_token import EquationToken
from equation_analyzer.equation_tokenizer import tokens, tokens_vec


@dataclass(frozen=True)
class Point:
    """A sampled point of an equation's graph."""
    x: np.float32
    y: np.float32


@dataclass
class EquationData:
    """Everything needed to draw an equation: its source, samples and real zeros."""
    literal: str
    points: List[Point] = field(default_factory=list)
    zeros: List[np.float32] = field(default_factory=list)


def x_values(x_min: float, x_max: float, step: float) -> List[np.float32]:
    """
    Generate sample positions from x_min up to and including x_max.

    The position is accumulated in binary32 (x += step) so the samples match
    what repeated single precision addition produces.

    Args:
        x_min: First sample
        x_max: Inclusive upper bound
        step: Distance between samples

    Returns:
        Sample positions in ascending order

    Raises:
        EquationEvalError: If the range cannot be sampled
    """
    low = np.float32(x_min)
    high = np.float32(x_max)
    increment = np.float32(step)

    if not (np.isfinite(low) and np.isfinite(high) and np.isfinite(increment)) or increment <= 0:
        raise EquationEvalError(
            EquationErrorKind.INVALID_RANGE,
            message="Invalid plot range",
            received=f"x_min={x_min}, x_max={x_max}, step={step}",
            expected="Finite bounds and a positive, finite step",
            example="plot('y = x^2', -2, 2, 0.5)"
        )

    values = []
    x = low
    with np.errstate(all="ignore"):
        while x <= high:
            values.append(x)
            next_x = x + increment
            if next_x == x:
                raise EquationEvalError(
                    EquationErrorKind.INVALID_RANGE,
                    message="Plot step is too small to advance",
                    received=f"step={step} at x={x}",
                    suggestion="Use a larger step"
                )

            x = next_x

    return values


class EquationCalculator:
    """
    Evaluates and plots equations.

    A new tokenizer, parser and value stack are created for every request so
    one calculator can serve concurrent callers.
    """

    def __init__(self, config: EquationCalculatorConfig | None = None) -> None:
        """
        Initialize the calculator.

        Args:
            config: Pipeline and worker settings, defaults if None
        """
        self._config = config or EquationCalculatorConfig()
        self._evaluator = EquationEvaluator()
        self._logger = logging.getLogger("EquationCalculator")

    @property
    def config(self) -> EquationCalculatorConfig:
        """The pipeline and worker settings this calculator was built with."""
        return self._config

    def calculate(self, expression: str) -> np.float32:
        """
        Evaluate an expression with x set to 0.

        Args:
            expression: Expression such as "2 + 2" or "y = 3x^2"

        Returns:
            The result in binary32

        Raises:
            EquationTokenError: If tokenization fails
            EquationParseError: If parsing fails
            EquationEvalError: If evaluation fails
        """
        self._logger.debug("Calculating expression (%s pipeline): %s", self._config.pipeline.value, expression)

        try:
            result = self._run_pipeline(expression)

        except EquationError as e:
            self._logger.warning("Failed to calculate '%s': %s", expression, e.message, exc_info=True)
            raise

        self._logger.debug("Calculation successful: %s = %s", expression, result)
        return result

    def _run_pipeline(self, expression: str) -> np.float32:
        mode = self._config.pipeline
        if mode == EquationPipelineMode.STREAMING:
            return self._evaluator.evaluate(EquationParser(tokens(expression)))

        if mode == EquationPipelineMode.HYBRID:
            return self._evaluator.evaluate(parse(tokens(expression)))

        return self._evaluator.evaluate(parse(tokens_vec(expression)))

    def plot(self, expression: str, x_min: float, x_max: float, step: float) -> List[Point]:
        """
        Sample an expression over a range of x values.

        The expression is parsed once; points are evaluated in parallel and
        returned in ascending x order.

        Args:
            expression: Expression in x
            x_min: First sample
            x_max: Inclusive upper bound
            step: Distance between samples

        Returns:
            The sampled points

        Raises:
            EquationTokenError: If tokenization fails
            EquationParseError: If parsing fails
            EquationEvalError: If the range is invalid or any point fails to evaluate
        """
        self._logger.debug("Plotting '%s' over [%s, %s] step %s", expression, x_min, x_max, step)

        try:
            points = self._plot_rpn(parse(tokens_vec(expression)), x_min, x_max, step)

        except EquationError as e:
            self._logger.warning("Failed to plot '%s': %s", expression, e.message, exc_info=True)
            raise

        self._logger.debug("Plotted %d points for '%s'", len(points), expression)
        return points

    def _plot_rpn(self, rpn: List[EquationToken], x_min: float, x_max: float, step: float) -> List[Point]:
        xs = x_values(x_min, x_max, step)
        ys = parallel_map(lambda x: self._evaluator.evaluate(rpn, x), xs, self._config.max_workers)
        return [Point(x, y) for x, y in zip(xs, ys)]

    def equation_data(self, expression: str, x_min: float, x_max: float, step: float) -> EquationData:
        """
        Sample an expression and find its real zeros when it is linear or quadratic.

        Args:
            expression: Equation such as "y = x^2 - 4"
            x_min: First sample
            x_max: Inclusive upper bound
            step: Distance between samples

        Returns:
            The source text, sampled points and zeros

        Raises:
            EquationTokenError: If tokenization fails
            EquationParseError: If parsing fails
            EquationEvalError: If the range is invalid or any point fails to evaluate
        """
        self._logger.debug("Building equation data for '%s'", expression)

        try:
            infix = tokens_vec(expression)
            zeros = self._zeros(infix)
            points = self._plot_rpn(parse(infix), x_min, x_max, step)

        except EquationError as e:
            self._logger.warning("Failed to build equation data for '%s': %s", expression, e.message, exc_info=True)
            raise

        return EquationData(literal=expression, points=points, zeros=zeros)

    def _zeros(self, infix: List[EquationToken]) -> List[np.float32]:
        if detect_linear(infix):
            zero = linear_zero(infix)
            return [] if np.isnan(zero) else [zero]

        if detect_quadratic(infix):
            return list(quadratic_roots(*quadratic_coeffs(infix)))

        return []


_default_calculator = EquationCalculator()


def calculate(expression: str) -> np.float32:
    """Evaluate an expression with the default calculator."""
    return _default_calculator.calculate(expression)


def plot(expression: str, x_min: float, x_max: float, step: float) -> List[Point]:
    """Sample an expression over a range with the default calculator."""
    return _default_calculator.plot(expression, x_min, x_max, step)


def equation_data(expression: str, x_min: float, x_max: float, step: float) -> EquationData:
    """Build graph data for an equation with the default calculator."""
    return _default_calculator.equation_data(expression, x_min, x_max, step)
