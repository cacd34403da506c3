"""
Module: batch_helpers.py
Description: Utility functions for batch operations.

Provides helper functions for splitting queued operations into
fixed-size chunks, each of which becomes one grouped round trip.

Key Components:
- chunk_list(): Split lists into smaller chunks
- split_into_batches(): Partition operations by batch size

Dependencies: typing
Author: listbatch maintainers
"""

from typing import List, TypeVar, Sequence

T = TypeVar('T')


def chunk_list(items: Sequence[T], chunk_size: int) -> List[List[T]]:
    """
    Split a sequence into smaller chunks of specified size.

    Chunks preserve input order and only the last chunk may be shorter
    than chunk_size.

    Args:
        items: Sequence to split into chunks
        chunk_size: Maximum size of each chunk

    Returns:
        List of chunks, where each chunk is a list of items

    Raises:
        ValueError: If chunk_size is not positive

    Example:
        >>> chunk_list([1, 2, 3, 4, 5], 2)
        [[1, 2], [3, 4], [5]]
    """
    if not isinstance(items, (list, tuple)):
        raise ValueError("items must be a list")
    if not isinstance(chunk_size, int) or isinstance(chunk_size, bool) or chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    chunks = []
    for i in range(0, len(items), chunk_size):
        chunks.append(list(items[i:i + chunk_size]))

    return chunks


def split_into_batches(operations: Sequence[T], batch_size: int = 100) -> List[List[T]]:
    """
    Partition operations into batches of at most batch_size.

    Concatenating the returned batches in order reproduces the input.

    Args:
        operations: Operations in enqueue order
        batch_size: Maximum operations per batch (>= 1)

    Returns:
        List of batches

    Raises:
        ValueError: If batch_size is less than 1
    """
    if not isinstance(batch_size, int) or isinstance(batch_size, bool) or batch_size < 1:
        raise ValueError("batch_size must be at least 1")

    return chunk_list(operations, batch_size)
