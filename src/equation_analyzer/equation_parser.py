"""Shunting-Yard parser converting equation tokens to Reverse Polish Notation."""

from collections import deque
from typing import Callable, Deque, Iterable, Iterator, List

from equation_analyzer.equation_error import EquationErrorKind, EquationParseError
from equation_analyzer.equation_token import (
    Assoc, CONSTANT_TYPES, EquationOperand, EquationToken, EquationTokenType, INFIX_OPERATORS,
    SCALAR_TYPES, SYNTHETIC_TYPES, UNARY_FUNCTIONS, is_variadic, operand_for, variadic_end
)


class EquationParser:
    """
    Converts infix tokens to RPN using Dijkstra's Shunting-Yard algorithm.

    Variadic functions are not pushed onto the operator stack.  Their opener
    is emitted straight to the output, followed by the scalar arguments, and
    the matching close paren emits a synthetic END_<F> marker so the evaluator
    knows where the argument list stops.

    The parser is itself an iterator: pulling from it consumes just enough
    input to release the next RPN token.  `parse()` drives the same state
    machine over the whole input and returns the collected output.
    """

    def __init__(self, tokens: Iterable[EquationToken]) -> None:
        """
        Initialize parser over an iterable of infix tokens.

        Args:
            tokens: Tokens to parse, normally terminated by END_INPUT
        """
        self._tokens = iter(tokens)
        self._operator_stack: List[EquationOperand] = []
        self._output_queue: Deque[EquationToken] = deque()
        self._paren_depth = 0
        self._current_variadic: EquationTokenType | None = None
        self._saw_end = False

    def __iter__(self) -> Iterator[EquationToken]:
        return self

    def __next__(self) -> EquationToken:
        while not self._output_queue:
            if self._saw_end:
                raise StopIteration

            token = next(self._tokens, None)
            if token is None:
                raise self._no_end_marker()

            self._process_token(token, self._output_queue.append)

        return self._output_queue.popleft()

    def parse(self) -> List[EquationToken]:
        """
        Parse all remaining input into RPN.

        Returns:
            The RPN token list

        Raises:
            EquationParseError: If the token stream is malformed
        """
        output: List[EquationToken] = list(self._output_queue)
        self._output_queue.clear()

        for token in self._tokens:
            self._process_token(token, output.append)
            if self._saw_end:
                break

        if not self._saw_end:
            raise self._no_end_marker()

        return output

    def _no_end_marker(self) -> EquationParseError:
        return EquationParseError(
            EquationErrorKind.NO_END_MARKER,
            message="No end token found",
            expected="Token stream terminated by END_INPUT",
            context="Token streams produced by the tokenizer always end with END_INPUT"
        )

    def _process_token(self, token: EquationToken, emit: Callable[[EquationToken], None]) -> None:
        token_type = token.type

        if token_type in SYNTHETIC_TYPES:
            raise EquationParseError(
                EquationErrorKind.SYNTHETIC_LEAKED,
                message=f"Synthetic token {token_type.name} found in parser input",
                position=token.position,
                context="END_<function> markers are created by the parser and cannot appear in its input"
            )

        if self._current_variadic is not None:
            self._process_variadic_param(token, emit)
            return

        if token_type in (EquationTokenType.Y, EquationTokenType.EQUAL, EquationTokenType.COMMA):
            return

        if token_type in CONSTANT_TYPES or token_type in SCALAR_TYPES:
            emit(token)
            return

        if is_variadic(token_type):
            emit(token)
            self._current_variadic = token_type
            return

        if token_type in UNARY_FUNCTIONS or token_type == EquationTokenType.OPEN_PAREN:
            self._operator_stack.append(operand_for(token))
            self._paren_depth += 1
            return

        if token_type == EquationTokenType.CLOSE_PAREN:
            self._close_paren(token, emit)
            return

        if token_type in INFIX_OPERATORS:
            self._push_operator(operand_for(token), emit)
            return

        if token_type == EquationTokenType.END_INPUT:
            self._saw_end = True
            self._flush(emit)
            return

        raise EquationParseError(
            EquationErrorKind.UNKNOWN_OPERATOR,
            message=f"Unexpected token: {token_type.name}",
            position=token.position
        )

    def _process_variadic_param(self, token: EquationToken, emit: Callable[[EquationToken], None]) -> None:
        assert self._current_variadic is not None, "Not inside a variadic argument list"
        token_type = token.type

        if token_type in SCALAR_TYPES:
            emit(token)
            return

        if token_type == EquationTokenType.COMMA:
            return

        if token_type == EquationTokenType.CLOSE_PAREN:
            emit(EquationToken(variadic_end(self._current_variadic), position=token.position))
            self._current_variadic = None
            return

        function_name = self._current_variadic.value.rstrip('(')
        if token_type == EquationTokenType.END_INPUT:
            raise EquationParseError(
                EquationErrorKind.UNMATCHED_OPEN,
                message=f"Unclosed argument list for {function_name}",
                position=token.position,
                expected="')' to close the argument list",
                example=f"{function_name}(1, 2, 3)"
            )

        raise EquationParseError(
            EquationErrorKind.VARIADIC_ARGS_NOT_SCALAR,
            message="Params can only be numbers",
            position=token.position,
            received=f"Token: {token_type.name}",
            expected="Numbers or x terms separated by commas",
            example=f"{function_name}(1, -2.5, 3x)",
            context="Expressions and nested function calls are not allowed inside min, max, avg, med, mode or ch"
        )

    def _close_paren(self, token: EquationToken, emit: Callable[[EquationToken], None]) -> None:
        self._paren_depth -= 1
        if self._paren_depth < 0:
            raise EquationParseError(
                EquationErrorKind.UNMATCHED_CLOSE,
                message="Invalid closing parenthesis",
                position=token.position,
                received="')' with no matching '('",
                suggestion="Remove the extra ')' or add the missing '('"
            )

        while self._operator_stack and not self._operator_stack[-1].paren_opener:
            emit(self._operator_stack.pop().token)

        # paren_depth counts openers on the stack, so one must be here
        opener = self._operator_stack.pop()
        if opener.is_func:
            emit(opener.token)

    def _push_operator(self, o1: EquationOperand, emit: Callable[[EquationToken], None]) -> None:
        while self._operator_stack:
            o2 = self._operator_stack[-1]
            if o2.paren_opener:
                break

            if not (o2.prec > o1.prec or (o2.prec == o1.prec and o1.assoc == Assoc.LEFT)):
                break

            emit(self._operator_stack.pop().token)

        self._operator_stack.append(o1)

    def _flush(self, emit: Callable[[EquationToken], None]) -> None:
        while self._operator_stack:
            operand = self._operator_stack.pop()
            if operand.paren_opener:
                raise self._unmatched_open(operand.token)

            emit(operand.token)

        if self._paren_depth != 0:
            raise EquationParseError(
                EquationErrorKind.UNMATCHED_OPEN,
                message="Invalid function",
                expected="Every '(' closed by ')'"
            )

    def _unmatched_open(self, token: EquationToken) -> EquationParseError:
        return EquationParseError(
            EquationErrorKind.UNMATCHED_OPEN,
            message="Invalid opening parenthesis",
            position=token.position,
            received=f"Unclosed: {token.type.value}",
            expected="A matching ')'",
            suggestion="Add the missing ')'",
            example="Correct: (2 + 3) * 4\\nIncorrect: ((2 + 3) * 4"
        )


def parse(tokens: Iterable[EquationToken]) -> List[EquationToken]:
    """
    Convert infix tokens to an RPN list.

    Args:
        tokens: Infix tokens terminated by END_INPUT (a list or a streaming tokenizer)

    Returns:
        RPN token list

    Raises:
        EquationParseError: If the tokens are malformed
        EquationTokenError: If a streaming tokenizer fails while being consumed
    """
    return EquationParser(tokens).parse()
