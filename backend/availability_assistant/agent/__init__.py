"""LangGraph availability pipeline."""

from .graph import availability_graph, run_availability_check, create_availability_graph
from .state import AvailabilityState, create_initial_state
from .time_normalizer import TimeNormalizer, NormalizationError

__all__ = [
    "availability_graph",
    "run_availability_check",
    "create_availability_graph",
    "AvailabilityState",
    "create_initial_state",
    "TimeNormalizer",
    "NormalizationError"
]
