"""
Module: batch
Description: Batch execution engine.

- ListOperationBuilder: Fluent per-list operation queue
- BatchBuilder: Partitions, dispatches and aggregates queued operations
- dispatcher: One chunk as one grouped transaction
- analysis / convenience: Pre-flight helpers and one-call wrappers
"""

from .analysis import (
    BATCH_CONSTANTS,
    BatchStatistics,
    ExecutionEstimate,
    ValidationSummary,
    analyze_batch_operations,
    estimate_execution_time,
    get_optimal_batch_size,
    validate_batch_operations,
)
from .builder import BatchBuilder, create_batch_builder
from .convenience import (
    MultiListBuilder,
    create_multi_list_builder,
    execute_batch_operations,
    execute_single_batch,
)
from .dispatcher import ResultSlot, add_operation_to_batch, execute_batch
from .list_builder import ListOperationBuilder

__all__ = [
    "BatchBuilder",
    "create_batch_builder",
    "ListOperationBuilder",
    "ResultSlot",
    "add_operation_to_batch",
    "execute_batch",
    "MultiListBuilder",
    "create_multi_list_builder",
    "execute_batch_operations",
    "execute_single_batch",
    "BATCH_CONSTANTS",
    "BatchStatistics",
    "ExecutionEstimate",
    "ValidationSummary",
    "analyze_batch_operations",
    "estimate_execution_time",
    "get_optimal_batch_size",
    "validate_batch_operations",
]
