"""
Module: utils
Description: Package initialization for utility functions.

This package contains shared helpers used throughout listbatch:
- logger: Structured logging configuration and helpers
- batch_helpers: Chunking and batch partition helpers
"""

from .batch_helpers import chunk_list, split_into_batches
from .logger import configure_logging, get_logger

__all__ = [
    "chunk_list",
    "split_into_batches",
    "configure_logging",
    "get_logger",
]
