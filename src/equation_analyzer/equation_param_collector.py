"""Parameter collector for variadic functions."""

from collections import Counter
from typing import Callable, Dict, List

import numpy as np

from equation_analyzer.equation_error import EquationErrorKind, EquationEvalError
from equation_analyzer.equation_math import F32_NAN, binomial, is_non_negative_integer
from equation_analyzer.equation_token import EquationTokenType


def _sum_in_order(values: List[np.float32]) -> np.float32:
    """Sum left to right in binary32; a lone -0.0 keeps its sign."""
    total = values[0]
    for value in values[1:]:
        total = total + value

    return total


class EquationParamCollector:
    """
    Gathers the scalar arguments of a variadic call.

    The evaluator switches collection on when it meets a variadic opener,
    feeds it every NUMBER/X value, then asks it to reduce the parameters when
    the matching END_<F> marker arrives.  Variadics never nest, so a flat list
    is enough.
    """

    def __init__(self) -> None:
        self.collecting = False
        self.params: List[np.float32] = []
        self._reducers: Dict[EquationTokenType, Callable[[List[np.float32]], np.float32]] = {
            EquationTokenType.END_MIN: self._min,
            EquationTokenType.END_MAX: self._max,
            EquationTokenType.END_AVG: self._avg,
            EquationTokenType.END_MED: self._med,
            EquationTokenType.END_MODE: self._mode,
            EquationTokenType.END_CHOICE: self._choice,
        }

    def start(self) -> None:
        self.collecting = True
        self.params = []

    def push(self, value: np.float32) -> None:
        self.params.append(np.float32(value))

    def is_end_marker(self, token_type: EquationTokenType) -> bool:
        return token_type in self._reducers

    def finish(self, token_type: EquationTokenType) -> np.float32:
        """
        Reduce the collected parameters and stop collecting.

        Args:
            token_type: The END_<F> marker naming the reduction

        Returns:
            The reduced value

        Raises:
            EquationEvalError: If the parameters are invalid for the function
        """
        params = self.params
        self.collecting = False
        self.params = []

        with np.errstate(all="ignore"):
            return self._reducers[token_type](params)

    def _require_params(self, params: List[np.float32], name: str) -> None:
        if not params:
            raise EquationEvalError(
                EquationErrorKind.VARIADIC_ARITY,
                message=f"{name} requires at least one parameter",
                received="No parameters",
                example=f"{name}(1, 2, 3)"
            )

    def _min(self, params: List[np.float32]) -> np.float32:
        self._require_params(params, "min")
        return np.float32(np.fmin.reduce(np.array(params, dtype=np.float32)))

    def _max(self, params: List[np.float32]) -> np.float32:
        self._require_params(params, "max")
        return np.float32(np.fmax.reduce(np.array(params, dtype=np.float32)))

    def _avg(self, params: List[np.float32]) -> np.float32:
        self._require_params(params, "avg")
        return _sum_in_order(params) / np.float32(len(params))

    def _med(self, params: List[np.float32]) -> np.float32:
        self._require_params(params, "med")
        ordered = sorted(params)
        middle = len(ordered) // 2
        if len(ordered) % 2 == 1:
            return ordered[middle]

        return (ordered[middle - 1] + ordered[middle]) / np.float32(2.0)

    def _mode(self, params: List[np.float32]) -> np.float32:
        self._require_params(params, "mode")

        # Bucket on the raw bit pattern, so -0.0 and 0.0 are distinct
        bits = np.array(params, dtype=np.float32).view(np.uint32).tolist()
        counts = Counter(bits)
        highest = max(counts.values())
        if highest == 1:
            return F32_NAN

        values = dict(zip(bits, params))
        modes = [values[b] for b, count in counts.items() if count == highest]
        return _sum_in_order(modes) / np.float32(len(modes))

    def _choice(self, params: List[np.float32]) -> np.float32:
        if len(params) != 2:
            raise EquationEvalError(
                EquationErrorKind.VARIADIC_ARITY,
                message="ch requires exactly two parameters",
                received=f"{len(params)} parameters",
                expected="ch(n, k)",
                example="ch(5, 2)"
            )

        n, k = params
        if not is_non_negative_integer(n) or not is_non_negative_integer(k):
            raise EquationEvalError(
                EquationErrorKind.CHOICE_DOMAIN,
                message="ch parameters must be non-negative integers",
                received=f"ch({n}, {k})",
                example="ch(5, 2)"
            )

        return binomial(int(n), int(k))
