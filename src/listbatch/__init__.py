"""
listbatch: batched create/update/delete/validate operations against remote lists.
"""

from .batch import (
    BatchBuilder,
    ListOperationBuilder,
    create_batch_builder,
    execute_batch_operations,
    execute_single_batch,
)
from .client import BatchTransaction, ListClient, RestListClient
from .errors import (
    BatchCancelledError,
    BatchTransportError,
    ListBatchError,
    OperationValidationError,
    RemoteOperationError,
)
from .models import (
    BatchBuilderConfig,
    BatchError,
    BatchOperation,
    BatchResult,
    FormFieldValue,
    OperationResult,
    OperationType,
)
from .utils import configure_logging

__version__ = "0.1.0"

__all__ = [
    "BatchBuilder",
    "ListOperationBuilder",
    "create_batch_builder",
    "execute_batch_operations",
    "execute_single_batch",
    "BatchTransaction",
    "ListClient",
    "RestListClient",
    "ListBatchError",
    "OperationValidationError",
    "BatchTransportError",
    "RemoteOperationError",
    "BatchCancelledError",
    "BatchBuilderConfig",
    "BatchError",
    "BatchOperation",
    "BatchResult",
    "FormFieldValue",
    "OperationResult",
    "OperationType",
    "configure_logging",
]
