"""Order-preserving parallel map used for plotting."""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, TypeVar


T = TypeVar("T")
R = TypeVar("R")


def parallel_map(function: Callable[[T], R], items: Iterable[T], max_workers: int | None = None) -> List[R]:
    """
    Apply a function to every item on a thread pool.

    Results come back in the order of `items`, whatever order the workers
    finish in.  The first exception raised by `function` propagates.

    Args:
        function: Function to apply; must not mutate shared state
        items: Inputs to map over
        max_workers: Pool size, or None for the executor's default

    Returns:
        List of results in input order
    """
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(function, items))
