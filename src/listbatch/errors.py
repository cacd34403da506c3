"""
Module: errors.py
Description: Exception hierarchy for listbatch.

Only BatchCancelledError and programmer misuse ever escape
BatchBuilder.execute(); every other failure is folded into the
BatchResult as a failed OperationResult.
"""

from typing import Optional


class ListBatchError(Exception):
    """Base exception for listbatch errors."""


class OperationValidationError(ListBatchError, ValueError):
    """An operation is missing a field its operation type requires."""


class BatchTransportError(ListBatchError):
    """The grouped round trip for a chunk failed as a whole."""


class RemoteOperationError(ListBatchError):
    """The remote service processed a request and reported a failure."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BatchCancelledError(ListBatchError):
    """Execution was cancelled before all chunks were dispatched."""
