"""
Module: analysis.py
Description: Pre-flight validation and statistics for batch operations.

Lets callers check a list of operations, pick a batch size and estimate
run time before anything is sent to the remote service.

Key Components:
- validate_batch_operations(): Index-prefixed validation messages
- analyze_batch_operations(): Counts per type and per list
- get_optimal_batch_size(): Batch size recommendation
- estimate_execution_time(): Rough duration estimate
- BATCH_CONSTANTS: Batch size, timeout and retry defaults

Dependencies: pydantic, math, typing
Author: listbatch maintainers
"""

import math
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Sequence, Union

from pydantic import BaseModel, Field, ValidationError

from ..models.operation import BatchOperation, OperationType, missing_operation_fields

BATCH_CONSTANTS = MappingProxyType({
    "DEFAULT_BATCH_SIZE": 100,
    "CONSERVATIVE_BATCH_SIZE": 25,
    "MAX_RECOMMENDED_BATCH_SIZE": 200,
    "MIN_BATCH_SIZE": 1,
    # Operation timeouts (milliseconds)
    "DEFAULT_TIMEOUT": 30000,
    "COMPLEX_OPERATION_TIMEOUT": 60000,
    # Retry configuration
    "DEFAULT_MAX_RETRIES": 3,
    "RETRY_DELAY_MS": 1000,
})

OperationInput = Union[BatchOperation, Mapping[str, Any]]


class ValidationSummary(BaseModel):
    """Outcome of validate_batch_operations()."""

    is_valid: bool = Field(..., description="True when no errors were found")
    errors: List[str] = Field(default_factory=list, description="Index-prefixed messages")


class BatchStatistics(BaseModel):
    """
    Statistics over a list of operations.

    Attributes:
        total_operations: Number of operations
        operations_by_type: Count per operation type value
        operations_by_list: Count per list title
        etag_operations: Operations carrying an etag
        form_value_operations: Operations carrying form values
    """

    total_operations: int = Field(..., ge=0)
    operations_by_type: Dict[str, int] = Field(default_factory=dict)
    operations_by_list: Dict[str, int] = Field(default_factory=dict)
    etag_operations: int = Field(default=0, ge=0)
    form_value_operations: int = Field(default=0, ge=0)

    def estimated_batches(self, batch_size: int) -> int:
        """Number of chunks the operations split into at batch_size."""
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        return math.ceil(self.total_operations / batch_size)


class ExecutionEstimate(BaseModel):
    """Outcome of estimate_execution_time()."""

    estimated_seconds: int = Field(..., ge=0)
    estimated_batches: int = Field(..., ge=0)
    factors: List[str] = Field(default_factory=list)


def validate_batch_operations(operations: Sequence[OperationInput]) -> ValidationSummary:
    """
    Validate operations before execution.

    Accepts BatchOperation instances or plain mappings of their fields.

    Args:
        operations: Operations to validate

    Returns:
        ValidationSummary with one message per problem, prefixed by index

    Example:
        >>> validate_batch_operations([{"list_name": "Tasks", "operation_type": "delete"}]).errors
        ['Operation 0: item_id is required for delete operation']
    """
    errors: List[str] = []

    for index, raw in enumerate(operations):
        if isinstance(raw, BatchOperation):
            operation = raw
        else:
            try:
                operation = BatchOperation.model_validate(raw)
            except ValidationError as e:
                for error in e.errors():
                    field = ".".join(str(part) for part in error["loc"]) or "operation"
                    errors.append(f"Operation {index}: {field} {error['msg']}")
                continue

        for field in missing_operation_fields(operation):
            errors.append(
                f"Operation {index}: {field} is required for "
                f"{operation.operation_type.value} operation"
            )

    return ValidationSummary(is_valid=not errors, errors=errors)


def analyze_batch_operations(operations: Sequence[BatchOperation]) -> BatchStatistics:
    """
    Count operations by type and by list.

    Args:
        operations: Operations to analyze

    Returns:
        BatchStatistics for the operations
    """
    by_type: Dict[str, int] = {}
    by_list: Dict[str, int] = {}
    etag_operations = 0
    form_value_operations = 0

    for operation in operations:
        type_key = operation.operation_type.value
        by_type[type_key] = by_type.get(type_key, 0) + 1
        by_list[operation.list_name] = by_list.get(operation.list_name, 0) + 1

        if operation.etag:
            etag_operations += 1
        if operation.form_values:
            form_value_operations += 1

    return BatchStatistics(
        total_operations=len(operations),
        operations_by_type=by_type,
        operations_by_list=by_list,
        etag_operations=etag_operations,
        form_value_operations=form_value_operations
    )


def get_optimal_batch_size(operations: Sequence[BatchOperation]) -> int:
    """
    Recommend a batch size for the operations.

    Server-side validation makes each request heavier, so any operation
    with form values drops to the conservative size.

    Args:
        operations: Operations to execute

    Returns:
        25, 75 or 100
    """
    stats = analyze_batch_operations(operations)

    if stats.form_value_operations > 0:
        return BATCH_CONSTANTS["CONSERVATIVE_BATCH_SIZE"]
    if len(stats.operations_by_list) > 5:
        return 75

    return BATCH_CONSTANTS["DEFAULT_BATCH_SIZE"]


def estimate_execution_time(
    operations: Sequence[BatchOperation],
    batch_size: int = BATCH_CONSTANTS["DEFAULT_BATCH_SIZE"],
) -> ExecutionEstimate:
    """
    Estimate how long executing the operations will take.

    Args:
        operations: Operations to execute
        batch_size: Batch size that will be used

    Returns:
        ExecutionEstimate with seconds rounded up and contributing factors
    """
    stats = analyze_batch_operations(operations)
    estimated_batches = stats.estimated_batches(batch_size)
    factors: List[str] = []

    # Base time per batch (seconds)
    time_per_batch = 2.0

    if stats.form_value_operations > 0:
        time_per_batch += 1
        factors.append("Form validation operations increase time")

    if len(stats.operations_by_list) > 3:
        time_per_batch += 0.5
        factors.append("Multiple lists increase complexity")

    if stats.operations_by_type.get(OperationType.DELETE.value, 0) > stats.total_operations * 0.3:
        time_per_batch += 0.5
        factors.append("Many delete operations may require additional processing")

    return ExecutionEstimate(
        estimated_seconds=math.ceil(estimated_batches * time_per_batch),
        estimated_batches=estimated_batches,
        factors=factors
    )
