"""Tests for the calculator façade: calculate, plot and equation data."""

import logging

import pytest

import numpy as np

from equation_analyzer import (
    EquationCalculator, EquationCalculatorConfig, EquationData, EquationError, EquationErrorKind, EquationEvalError,
    EquationParseError, EquationPipelineMode, EquationTokenError, Point, calculate, equation_data, plot, x_values
)


def as_pairs(points):
    return [(float(point.x), float(point.y)) for point in points]


class TestCalculate:
    """Test the calculate entry points."""

    @pytest.mark.parametrize("expression,expected", [
        ("2 + 2", 4.0),
        ("(2 + 3) * 4", 20.0),
        ("2^3^2", 512.0),
        ("-2^2", -4.0),
        ("min(1,2,3)", 1.0),
        ("avg(1,2,3,4,5)", 3.0),
        ("mode(1,1,3,3)", 2.0),
        ("ch(5,2)", 10.0),
    ])
    def test_exact_results(self, calculator, expression, expected):
        """Test results that are exact in binary32."""
        assert calculator.calculate(expression) == expected

    def test_module_level_calculate(self, helpers):
        """Test the default calculator entry point."""
        helpers.assert_close(calculate("sin(π/2)"), 1.0)
        helpers.assert_close(calculate("log_10(100)"), 2.0)

    def test_x_defaults_to_zero(self, calculator):
        """Test that calculate substitutes x = 0."""
        assert calculator.calculate("y = 3x^2 + 2x + 7") == 7.0

    @pytest.mark.parametrize("value", [
        0.0, 1.5, 0.1, 123456.79, 16777216.0, 3.4028235e38, 1.1754944e-38, -0.1, -2.5e-5, 7e10,
    ])
    def test_number_round_trip(self, calculator, value):
        """Test that formatting a binary32 value and calculating it returns the same bits."""
        expected = np.float32(value)
        text = np.format_float_positional(expected, unique=True, trim='-')
        result = calculator.calculate(text)
        assert result.tobytes() == expected.tobytes()

    def test_default_config(self, calculator):
        """Test the default calculator configuration."""
        assert calculator.config == EquationCalculatorConfig()
        assert calculator.config.pipeline == EquationPipelineMode.VEC
        assert calculator.config.max_workers is None

    @pytest.mark.parametrize("expression,error_class,kind", [
        ("", EquationTokenError, EquationErrorKind.EMPTY_INPUT),
        ("2 # 2", EquationTokenError, EquationErrorKind.BAD_CHAR),
        ("((2)", EquationParseError, EquationErrorKind.UNMATCHED_OPEN),
        ("2 +", EquationEvalError, EquationErrorKind.UNDERFLOW),
    ])
    def test_errors_propagate(self, calculator, expression, error_class, kind):
        """Test that every stage's errors reach the caller."""
        with pytest.raises(error_class) as exc_info:
            calculator.calculate(expression)

        assert exc_info.value.kind == kind


class TestPipelineEquivalence:
    """Test that the three pipelines agree."""

    EXPRESSIONS = [
        "2 + 2",
        "(2 + 3) * 4 - 6 / 3",
        "2^3^2",
        "-2^2 + 2^-2^2",
        "-5! + 3!",
        "sin(π/2) + cos(0) * tan(π/4)",
        "log_10(100) + ln(e)",
        "min(1,2,3) + max(4, 5) + avg(1,2,3,4,5)",
        "med(4, 1, 3, 2) * mode(1, 1, 3, 3)",
        "ch(10, 3) %% 7",
        "50 % 10 + abs(-3) + sqrt(16)",
        "-(1 + 2) * -sin(π/6)",
        "y = 3x^2 - 2x + 1",
        "1 / 0",
    ]

    @pytest.mark.parametrize("expression", EXPRESSIONS)
    @pytest.mark.parametrize("pipeline", [EquationPipelineMode.HYBRID, EquationPipelineMode.STREAMING])
    def test_same_results(self, calculator_factory, expression, pipeline):
        """Test that hybrid and streaming pipelines match the eager one."""
        expected = calculator_factory().calculate(expression)
        result = calculator_factory(pipeline=pipeline).calculate(expression)
        assert isinstance(result, np.float32)
        assert result == expected or abs(float(result) - float(expected)) < 1e-4

    @pytest.mark.parametrize("pipeline", list(EquationPipelineMode))
    def test_negative_sqrt(self, calculator_factory, helpers, pipeline):
        """Test that every pipeline turns a negative square root into NaN."""
        helpers.assert_nan(calculator_factory(pipeline=pipeline).calculate("sqrt(-4) + 1"))

    @pytest.mark.parametrize("expression,kind", [
        ("((2)", EquationErrorKind.UNMATCHED_OPEN),
        ("2)", EquationErrorKind.UNMATCHED_CLOSE),
        ("2 +", EquationErrorKind.UNDERFLOW),
        ("2 3", EquationErrorKind.UNBALANCED),
        ("2 $ 3", EquationErrorKind.BAD_CHAR),
        ("min(1, (2))", EquationErrorKind.VARIADIC_ARGS_NOT_SCALAR),
        ("2.5!", EquationErrorKind.FACTORIAL_DOMAIN),
    ])
    @pytest.mark.parametrize("pipeline", list(EquationPipelineMode))
    def test_same_errors(self, calculator_factory, expression, kind, pipeline):
        """Test that every pipeline reports the same error kind."""
        with pytest.raises(EquationError) as exc_info:
            calculator_factory(pipeline=pipeline).calculate(expression)

        assert exc_info.value.kind == kind


class TestPlot:
    """Test plotting."""

    def test_parabola(self, calculator):
        """Test sampling y = x^2."""
        points = calculator.plot("y = x^2", -2, 2, 1)
        assert as_pairs(points) == [(-2, 4), (-1, 1), (0, 0), (1, 1), (2, 4)]

    def test_line(self, calculator):
        """Test sampling y = -2x + 1."""
        points = calculator.plot("y = -2x + 1", -1, 1, 1)
        assert as_pairs(points) == [(-1, 3), (0, 1), (1, -1)]

    def test_points_are_binary32(self, calculator):
        """Test that plotted coordinates are numpy float32."""
        point = calculator.plot("x", 0, 0, 1)[0]
        assert point == Point(np.float32(0.0), np.float32(0.0))
        assert isinstance(point.x, np.float32)
        assert isinstance(point.y, np.float32)

    @pytest.mark.parametrize("max_workers", [1, 4, 16])
    def test_ordering(self, calculator_factory, max_workers):
        """Test that points come back in ascending x order whatever the pool size."""
        points = calculator_factory(max_workers=max_workers).plot("2x + min(x, 100)", 0, 200, 1)
        assert len(points) == 201
        assert [float(p.x) for p in points] == [float(x) for x in range(201)]
        assert [float(p.y) for p in points] == [2.0 * x + min(x, 100) for x in range(201)]

    def test_nan_points_kept(self, calculator, helpers):
        """Test that undefined samples are kept as NaN rather than failing."""
        points = calculator.plot("y = sqrt(x)", -1, 1, 1)
        helpers.assert_nan(points[0].y)
        assert as_pairs(points[1:]) == [(0, 0), (1, 1)]

    def test_empty_range(self, calculator):
        """Test that x_min above x_max produces no points."""
        assert calculator.plot("x", 1, 0, 1) == []

    def test_module_level_plot(self):
        """Test the default calculator entry point."""
        assert as_pairs(plot("y = x", 0, 1, 0.5)) == [(0, 0), (0.5, 0.5), (1, 1)]

    def test_point_failure_propagates(self, calculator):
        """Test that an error at any sample fails the whole plot."""
        with pytest.raises(EquationEvalError) as exc_info:
            calculator.plot("x!", 0, 1, 0.5)

        assert exc_info.value.kind == EquationErrorKind.FACTORIAL_DOMAIN

    def test_parse_failure(self, calculator):
        """Test that malformed expressions fail before sampling."""
        with pytest.raises(EquationParseError):
            calculator.plot("y = (x", 0, 1, 1)


class TestXValues:
    """Test the sample generator."""

    def test_exact_steps(self):
        """Test steps that are exact in binary32."""
        assert [float(x) for x in x_values(0, 1, 0.25)] == [0.0, 0.25, 0.5, 0.75, 1.0]

    def test_accumulates_in_binary32(self):
        """Test that positions are built by repeated single-precision addition."""
        expected = []
        x = np.float32(0.0)
        while x <= np.float32(1.0):
            expected.append(x)
            x = x + np.float32(0.1)

        result = x_values(0, 1, 0.1)
        assert result == expected
        assert all(isinstance(value, np.float32) for value in result)

    @pytest.mark.parametrize("x_min,x_max,step", [
        (0, 1, 0),
        (0, 1, -1),
        (0, 1, float("nan")),
        (0, 1, float("inf")),
        (float("-inf"), 1, 1),
        (0, float("inf"), 1),
        (1e6, 1e6 + 1, 1e-6),
    ])
    def test_invalid_ranges(self, calculator, x_min, x_max, step):
        """Test that unusable ranges are rejected."""
        with pytest.raises(EquationEvalError) as exc_info:
            x_values(x_min, x_max, step)

        assert exc_info.value.kind == EquationErrorKind.INVALID_RANGE

        with pytest.raises(EquationEvalError):
            calculator.plot("x", x_min, x_max, step)


class TestEquationData:
    """Test graph data with zeros."""

    def test_linear_zero(self, calculator):
        """Test that a line reports its single zero."""
        data = calculator.equation_data("y = 2x - 4", 0, 4, 2)
        assert isinstance(data, EquationData)
        assert data.literal == "y = 2x - 4"
        assert data.zeros == [2.0]
        assert as_pairs(data.points) == [(0, -4), (2, 0), (4, 4)]

    @pytest.mark.parametrize("expression,zeros", [
        ("y = x^2 - 4", [2.0, -2.0]),
        ("y = x^2 - 2x + 1", [1.0]),
        ("y = x^2 + 1", []),
        ("y = -2x^2 + 3x + 2", [-0.5, 2.0]),
        ("y = 0x^2 + 2x + 4", [-2.0]),
        ("y = 0x^2 + 5", []),
    ])
    def test_quadratic_zeros(self, calculator, expression, zeros):
        """Test that quadratics report their real roots."""
        data = calculator.equation_data(expression, -1, 1, 1)
        assert [float(zero) for zero in data.zeros] == zeros

    @pytest.mark.parametrize("expression", ["y = 5", "y = sin(x)", "y = x^3"])
    def test_no_zeros(self, calculator, expression):
        """Test that horizontal lines and other shapes report no zeros."""
        assert calculator.equation_data(expression, -1, 1, 1).zeros == []

    def test_points_match_plot(self, calculator):
        """Test that equation data samples exactly like plot."""
        data = calculator.equation_data("y = x^2 - 3x - 4", -2, 5, 0.5)
        assert data.points == calculator.plot("y = x^2 - 3x - 4", -2, 5, 0.5)

    def test_module_level_equation_data(self):
        """Test the default calculator entry point."""
        assert equation_data("y = x - 5", 0, 1, 1).zeros == [5.0]


class TestLogging:
    """Test calculator logging."""

    def test_failure_logged(self, calculator, caplog):
        """Test that failed requests are logged as warnings with the traceback."""
        with caplog.at_level(logging.WARNING, logger="EquationCalculator"):
            with pytest.raises(EquationEvalError):
                calculator.calculate("2 +")

        records = [r for r in caplog.records if r.name == "EquationCalculator"]
        assert len(records) == 1
        assert records[0].levelno == logging.WARNING
        assert records[0].exc_info is not None

    def test_success_logged_at_debug(self, calculator, caplog):
        """Test that successful requests are logged at debug level."""
        with caplog.at_level(logging.DEBUG, logger="EquationCalculator"):
            calculator.calculate("2 + 2")

        messages = [r.getMessage() for r in caplog.records if r.name == "EquationCalculator"]
        assert any("2 + 2" in message for message in messages)
        assert all(r.levelno == logging.DEBUG for r in caplog.records if r.name == "EquationCalculator")

    def test_logger_name(self):
        """Test that calculators share the named logger."""
        calculator = EquationCalculator(EquationCalculatorConfig(pipeline=EquationPipelineMode.STREAMING))
        assert calculator._logger.name == "EquationCalculator"
