"""Equation calculator configuration."""

from dataclasses import dataclass
from enum import Enum


class EquationPipelineMode(Enum):
    """How the tokenizer, parser and evaluator are chained."""
    VEC = "vec"
    HYBRID = "hybrid"
    STREAMING = "streaming"


@dataclass
class EquationCalculatorConfig:
    """Configuration for an equation calculator."""
    pipeline: EquationPipelineMode = EquationPipelineMode.VEC
    max_workers: int | None = None
