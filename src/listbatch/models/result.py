"""
Module: result.py
Description: Result and configuration models for the batch engine.

Structures the outcome of one BatchBuilder.execute() call. Supports
partial success - some operations may succeed while others fail.

Key Components:
- OperationResult: Outcome of one operation
- BatchError: Failure-only view of an operation outcome
- BatchResult: Aggregate report for a whole run
- BatchBuilderConfig: Batch size and concurrency mode

Dependencies: pydantic, typing
Author: listbatch maintainers
"""

from typing import Any, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..config.settings import settings
from .operation import BatchOperation, OperationType


class OperationResult(BaseModel):
    """
    Result for a single operation.

    Contains either the remote response payload or an error message,
    never both.

    Attributes:
        operation_id: Identifier of the originating operation
        list_name: Target list title
        operation_type: Operation type
        success: Whether the operation succeeded
        data: Remote response payload (only when success=True)
        error: Error message (only when success=False)
        item_id: Echo of the operation's item ID
    """

    model_config = ConfigDict(frozen=True)

    operation_id: Optional[str] = Field(
        default=None,
        description="Identifier of the originating operation"
    )
    list_name: str = Field(
        ...,
        description="Target list title"
    )
    operation_type: OperationType = Field(
        ...,
        description="Operation type"
    )
    success: bool = Field(
        ...,
        description="Whether the operation succeeded"
    )
    data: Optional[Any] = Field(
        default=None,
        description="Remote response payload (only present if success=True)"
    )
    error: Optional[str] = Field(
        default=None,
        description="Error message (only present if success=False)"
    )
    item_id: Optional[int] = Field(
        default=None,
        description="Item ID of the originating operation"
    )

    @model_validator(mode='after')
    def validate_outcome(self) -> 'OperationResult':
        """Ensure a result carries data or an error, matching its success flag."""
        if self.success and self.error is not None:
            raise ValueError("successful result cannot carry an error")
        if not self.success:
            if not self.error:
                raise ValueError("failed result must carry an error message")
            if self.data is not None:
                raise ValueError("failed result cannot carry data")
        return self

    @classmethod
    def succeeded(cls, operation: BatchOperation, data: Any = None) -> 'OperationResult':
        """Build a successful result for an operation."""
        return cls(
            operation_id=operation.operation_id,
            list_name=operation.list_name,
            operation_type=operation.operation_type,
            success=True,
            data=data,
            item_id=operation.item_id
        )

    @classmethod
    def failed(cls, operation: BatchOperation, error: str) -> 'OperationResult':
        """Build a failed result for an operation."""
        return cls(
            operation_id=operation.operation_id,
            list_name=operation.list_name,
            operation_type=operation.operation_type,
            success=False,
            error=error or "Operation failed",
            item_id=operation.item_id
        )

    def to_batch_error(self) -> 'BatchError':
        """Return the failure-only view of this result."""
        if self.success:
            raise ValueError("only failed results convert to BatchError")
        return BatchError(
            list_name=self.list_name,
            operation_type=self.operation_type,
            error=self.error,
            item_id=self.item_id,
            operation_id=self.operation_id
        )


class BatchError(BaseModel):
    """
    Error information for a failed operation.

    Attributes:
        list_name: Target list title
        operation_type: Operation type
        error: Human-readable error description
        item_id: Item ID of the failed operation
        operation_id: Identifier of the failed operation
    """

    model_config = ConfigDict(frozen=True)

    list_name: str = Field(..., description="Target list title")
    operation_type: OperationType = Field(..., description="Operation type")
    error: str = Field(..., min_length=1, description="Human-readable error description")
    item_id: Optional[int] = Field(default=None, description="Item ID of the failed operation")
    operation_id: Optional[str] = Field(default=None, description="Identifier of the failed operation")


class BatchResult(BaseModel):
    """
    Aggregate report for one batch run.

    Results appear in enqueue order. success is true only when no
    operation failed; an empty run is a success.

    Attributes:
        success: True iff failed_operations == 0
        total_operations: Number of operations executed
        successful_operations: Number of operations that succeeded
        failed_operations: Number of operations that failed
        results: Per-operation results
        errors: Failed results only
    """

    success: bool = Field(..., description="Whether every operation succeeded")
    total_operations: int = Field(..., ge=0, description="Total number of operations")
    successful_operations: int = Field(..., ge=0, description="Number of operations that succeeded")
    failed_operations: int = Field(..., ge=0, description="Number of operations that failed")
    results: List[OperationResult] = Field(
        default_factory=list,
        description="Per-operation results"
    )
    errors: List[BatchError] = Field(
        default_factory=list,
        description="Failure-only view of the results"
    )

    @classmethod
    def from_results(cls, results: Sequence[OperationResult]) -> 'BatchResult':
        """
        Fold per-operation results into one report.

        Args:
            results: Operation results in enqueue order

        Returns:
            BatchResult with computed counts and error list
        """
        results = list(results)
        errors = [r.to_batch_error() for r in results if not r.success]
        failed = len(errors)

        return cls(
            success=failed == 0,
            total_operations=len(results),
            successful_operations=len(results) - failed,
            failed_operations=failed,
            results=results,
            errors=errors
        )

    @classmethod
    def empty(cls) -> 'BatchResult':
        """Report for a run with nothing queued."""
        return cls.from_results([])


class BatchBuilderConfig(BaseModel):
    """
    Configuration for BatchBuilder.

    Attributes:
        batch_size: Operations per grouped transaction
        enable_concurrency: Dispatch chunks concurrently instead of in order
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid"
    )

    batch_size: int = Field(
        default_factory=lambda: settings.default_batch_size,
        ge=1,
        description="Operations per grouped transaction"
    )
    enable_concurrency: bool = Field(
        default_factory=lambda: settings.enable_concurrency,
        description="Dispatch chunks concurrently instead of in order"
    )
