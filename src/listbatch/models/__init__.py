"""
Module: models
Description: Package initialization for Pydantic data models.

This package contains all data models used by listbatch:
- BatchOperation: Queued list operation with its type and payload
- OperationResult / BatchError / BatchResult: Execution outcomes
- BatchBuilderConfig: Batch size and concurrency mode

All models are exported here for convenient importing.
"""

from .operation import (
    BatchOperation,
    FormFieldValue,
    OperationType,
    missing_operation_fields,
    require_operation_fields,
)
from .result import BatchBuilderConfig, BatchError, BatchResult, OperationResult

__all__ = [
    "BatchOperation",
    "FormFieldValue",
    "OperationType",
    "missing_operation_fields",
    "require_operation_fields",
    "OperationResult",
    "BatchError",
    "BatchResult",
    "BatchBuilderConfig",
]
