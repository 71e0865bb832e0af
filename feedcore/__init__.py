"""Consistency layer for a social feed: graph edges, post interactions and their counters."""
from .results import Err, Failure, Ok, Result, ResultError

__version__ = "0.1.0"

__all__ = ["Err", "Failure", "Ok", "Result", "ResultError", "__version__"]
