"""Equation analyzer: tokenizer, Shunting-Yard parser, RPN evaluator and shape analyzers."""

# Main API
from equation_analyzer.equation_calculator import (
    EquationCalculator, EquationData, Point, calculate, equation_data, plot, x_values
)
from equation_analyzer.equation_config import EquationCalculatorConfig, EquationPipelineMode

# Exceptions
from equation_analyzer.equation_error import (
    EquationError, EquationErrorKind, EquationTokenError, EquationParseError, EquationEvalError
)

# Shape analyzers
from equation_analyzer.equation_analysis import (
    detect_linear, linear_coeffs, linear_zero, detect_quadratic, quadratic_coeffs
)

# Lower-level components (for advanced usage)
from equation_analyzer.equation_token import EquationToken, EquationTokenType, EquationOperand, Assoc, operand_for
from equation_analyzer.equation_tokenizer import EquationTokenizer, tokens, tokens_vec
from equation_analyzer.equation_parser import EquationParser, parse
from equation_analyzer.equation_evaluator import EquationEvaluator, evaluate
from equation_analyzer.equation_math import binomial, factorial, quadratic_roots
from equation_analyzer.equation_parallel import parallel_map


__all__ = [
    # Main API
    "EquationCalculator", "EquationData", "Point", "calculate", "equation_data", "plot", "x_values",
    "EquationCalculatorConfig", "EquationPipelineMode",

    # Exceptions
    "EquationError", "EquationErrorKind", "EquationTokenError", "EquationParseError", "EquationEvalError",

    # Shape analyzers
    "detect_linear", "linear_coeffs", "linear_zero", "detect_quadratic", "quadratic_coeffs",

    # Lower-level components
    "EquationToken", "EquationTokenType", "EquationOperand", "Assoc", "operand_for",
    "EquationTokenizer", "tokens", "tokens_vec", "EquationParser", "parse",
    "EquationEvaluator", "evaluate", "binomial", "factorial", "quadratic_roots", "parallel_map"
]
