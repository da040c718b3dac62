"""Tests for the order-preserving parallel map."""

import threading
import time

import pytest

from equation_analyzer import parallel_map


class TestParallelMap:
    """Test parallel_map."""

    def test_preserves_order(self):
        """Test that results follow input order even when later items finish first."""
        def slow_for_small(value):
            time.sleep(0.001 * (10 - value))
            return value * value

        assert parallel_map(slow_for_small, range(10), max_workers=10) == [v * v for v in range(10)]

    def test_uses_worker_threads(self):
        """Test that work runs off the calling thread."""
        caller = threading.get_ident()
        idents = parallel_map(lambda _: threading.get_ident(), range(4), max_workers=2)
        assert all(ident != caller for ident in idents)

    def test_empty_input(self):
        """Test mapping over nothing."""
        assert parallel_map(lambda value: value, []) == []

    def test_exception_propagates(self):
        """Test that a failing item fails the whole map."""
        def fail_on_three(value):
            if value == 3:
                raise ValueError("three")

            return value

        with pytest.raises(ValueError, match="three"):
            parallel_map(fail_on_three, range(6), max_workers=3)
