"""Stack machine evaluating equations in Reverse Polish Notation."""

from typing import Callable, Dict, Iterable, List

import numpy as np

from equation_analyzer.equation_error import EquationErrorKind, EquationEvalError
from equation_analyzer.equation_math import F32_E, F32_NAN, F32_PI, factorial_f32, is_non_negative_integer
from equation_analyzer.equation_param_collector import EquationParamCollector
from equation_analyzer.equation_token import EquationToken, EquationTokenType, is_variadic


UnaryOperation = Callable[[np.float32], np.float32]
BinaryOperation = Callable[[np.float32, np.float32], np.float32]


class EquationEvaluator:
    """
    Evaluates RPN produced by the parser.

    The evaluator holds no per-evaluation state: every call to `evaluate`
    gets its own value stack and parameter collector, so one instance can be
    shared between plot workers.
    """

    CONSTANTS = {
        EquationTokenType.PI: F32_PI,
        EquationTokenType.E: F32_E,
        EquationTokenType.NEG_PI: -F32_PI,
        EquationTokenType.NEG_E: -F32_E,
    }

    UNARY_OPERATIONS: Dict[EquationTokenType, UnaryOperation] = {
        EquationTokenType.SIN: np.sin,
        EquationTokenType.COS: np.cos,
        EquationTokenType.TAN: np.tan,
        EquationTokenType.ASIN: np.arcsin,
        EquationTokenType.ACOS: np.arccos,
        EquationTokenType.ATAN: np.arctan,
        EquationTokenType.ABS: np.abs,
        EquationTokenType.LN: np.log,
        EquationTokenType.UNARY_MINUS: np.negative,
    }

    BINARY_OPERATIONS: Dict[EquationTokenType, BinaryOperation] = {
        EquationTokenType.PLUS: np.add,
        EquationTokenType.MINUS: np.subtract,
        EquationTokenType.STAR: np.multiply,
        EquationTokenType.SLASH: np.divide,
        EquationTokenType.MODULO: np.fmod,
        EquationTokenType.POWER: np.power,
        EquationTokenType.PERCENT: lambda lhs, rhs: lhs * (rhs / np.float32(100.0)),
    }

    def evaluate(self, rpn: Iterable[EquationToken], x: float = 0.0) -> np.float32:
        """
        Evaluate an RPN token sequence.

        Args:
            rpn: RPN tokens, either a list or a streaming parser
            x: Value substituted for the free variable x

        Returns:
            The result as binary32.  A square root of a negative number ends
            evaluation early with NaN.

        Raises:
            EquationEvalError: If the RPN cannot be evaluated
            EquationParseError: If a streaming parser fails while being consumed
            EquationTokenError: If a streaming tokenizer fails while being consumed
        """
        x_value = np.float32(x)
        stack: List[np.float32] = []
        collector = EquationParamCollector()
        seen_tokens = False

        with np.errstate(all="ignore"):
            for token in rpn:
                seen_tokens = True

                if collector.collecting:
                    self._collect(collector, token, x_value, stack)
                    continue

                token_type = token.type

                if is_variadic(token_type):
                    collector.start()
                    continue

                if token_type == EquationTokenType.NUMBER:
                    stack.append(np.float32(token.n1))
                    continue

                if token_type == EquationTokenType.X:
                    stack.append(self._x_term(token, x_value))
                    continue

                constant = self.CONSTANTS.get(token_type)
                if constant is not None:
                    stack.append(constant)
                    continue

                if token_type == EquationTokenType.SQRT:
                    operand = self._pop(stack, token)
                    if operand < 0:
                        return F32_NAN

                    stack.append(np.sqrt(operand))
                    continue

                if token_type == EquationTokenType.FACTORIAL:
                    stack.append(self._factorial(self._pop(stack, token), token))
                    continue

                if token_type == EquationTokenType.LOG:
                    operand = self._pop(stack, token)
                    stack.append(np.log(operand) / np.log(np.float32(token.n1)))
                    continue

                unary = self.UNARY_OPERATIONS.get(token_type)
                if unary is not None:
                    stack.append(np.float32(unary(self._pop(stack, token))))
                    continue

                binary = self.BINARY_OPERATIONS.get(token_type)
                if binary is not None:
                    rhs = self._pop(stack, token)
                    lhs = self._pop(stack, token)
                    stack.append(np.float32(binary(lhs, rhs)))
                    continue

                raise EquationEvalError(
                    EquationErrorKind.UNKNOWN_TOKEN,
                    message=f"Cannot evaluate token: {token_type.name}",
                    position=token.position,
                    context="Only operands, operators, functions and END_<function> markers can appear in RPN"
                )

        if not seen_tokens:
            raise EquationEvalError(
                EquationErrorKind.INVALID_EQUATION,
                message="Invalid equation supplied",
                received="Nothing to evaluate",
                example="y = 2x + 1"
            )

        if len(stack) != 1:
            raise EquationEvalError(
                EquationErrorKind.UNBALANCED,
                message="Expression is unbalanced",
                received=f"{len(stack)} values left after evaluation",
                expected="Exactly one value",
                suggestion="Check for missing operators between values"
            )

        return stack[0]

    def _x_term(self, token: EquationToken, x: np.float32) -> np.float32:
        return np.float32(token.n1 * np.power(x, token.n2))

    def _collect(
        self,
        collector: EquationParamCollector,
        token: EquationToken,
        x: np.float32,
        stack: List[np.float32]
    ) -> None:
        token_type = token.type

        if token_type == EquationTokenType.NUMBER:
            collector.push(token.n1)
            return

        if token_type == EquationTokenType.X:
            collector.push(self._x_term(token, x))
            return

        if collector.is_end_marker(token_type):
            stack.append(collector.finish(token_type))
            return

        raise EquationEvalError(
            EquationErrorKind.INVALID_VARIADIC_PARAM,
            message="Invalid variadic function param",
            position=token.position,
            received=f"Token: {token_type.name}",
            expected="Numbers or x terms"
        )

    def _pop(self, stack: List[np.float32], token: EquationToken) -> np.float32:
        if not stack:
            raise EquationEvalError(
                EquationErrorKind.UNDERFLOW,
                message=f"Not enough operands for {token.type.value}",
                position=token.position,
                suggestion="Check that every operator has values on both sides"
            )

        return stack.pop()

    def _factorial(self, operand: np.float32, token: EquationToken) -> np.float32:
        if not is_non_negative_integer(operand):
            raise EquationEvalError(
                EquationErrorKind.FACTORIAL_DOMAIN,
                message="Factorial is only defined for non-negative integers",
                position=token.position,
                received=f"Value: {operand}",
                example="5! = 120"
            )

        return factorial_f32(int(operand))


def evaluate(rpn: Iterable[EquationToken], x: float = 0.0) -> np.float32:
    """Evaluate RPN tokens with a fresh evaluator."""
    return EquationEvaluator().evaluate(rpn, x)
