"""
Module: dispatcher.py
Description: Executes one chunk of operations as a single grouped transaction.

Execution is two-phase. Every operation is first registered against the
transaction with a ResultSlot whose resolve() is the completion callback;
the transaction is then committed once and the slots are read back in
a second pass. One operation failing never prevents the others in the
same chunk from reporting their own outcome.

Key Components:
- ResultSlot: Outcome holder filled by the transaction callback
- add_operation_to_batch(): Maps an operation type to a transaction call
- execute_batch(): Register, commit, collect for one chunk

Dependencies: dataclasses, typing, logger
Author: listbatch maintainers
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from ..client.base import BatchTransaction, ListClient
from ..models.operation import BatchOperation, OperationType, require_operation_fields
from ..models.result import OperationResult
from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ResultSlot:
    """Outcome of one registered call, filled after commit."""

    resolved: bool = False
    payload: Any = None
    error: Optional[BaseException] = None

    def resolve(self, payload: Any, error: Optional[BaseException] = None) -> None:
        self.resolved = True
        self.payload = payload
        self.error = error


def _error_message(error: Any, default: str) -> str:
    if error is None:
        return default
    message = str(error)
    if not message and isinstance(error, BaseException):
        message = type(error).__name__
    return message or default


def add_operation_to_batch(
    operation: BatchOperation,
    transaction: BatchTransaction,
    slot: ResultSlot,
) -> None:
    """
    Register a single operation against a grouped transaction.

    The operation's etag is passed through for updates and deletes.

    Args:
        operation: Operation to register
        transaction: Open grouped transaction
        slot: Slot receiving the outcome after commit

    Raises:
        OperationValidationError: If the operation misses a required field
        ValueError: If the operation type is not supported
    """
    require_operation_fields(operation)
    operation_type = operation.operation_type

    if operation_type == OperationType.ADD:
        transaction.add_item(
            operation.list_name,
            operation.data,
            on_complete=slot.resolve
        )
    elif operation_type == OperationType.UPDATE:
        transaction.update_item(
            operation.list_name,
            operation.item_id,
            operation.data,
            on_complete=slot.resolve,
            etag=operation.etag
        )
    elif operation_type == OperationType.DELETE:
        transaction.delete_item(
            operation.list_name,
            operation.item_id,
            on_complete=slot.resolve,
            etag=operation.etag
        )
    elif operation_type == OperationType.ADD_VALIDATE_UPDATE_ITEM_USING_PATH:
        transaction.add_validate_update_item_using_path(
            operation.list_name,
            operation.form_values,
            operation.path,
            on_complete=slot.resolve
        )
    elif operation_type == OperationType.VALIDATE_UPDATE_LIST_ITEM:
        transaction.validate_update_list_item(
            operation.list_name,
            operation.item_id,
            operation.form_values,
            on_complete=slot.resolve
        )
    else:
        raise ValueError(f"Unsupported operation type: {operation_type}")


async def execute_batch(
    client: ListClient,
    operations: Sequence[BatchOperation],
) -> List[OperationResult]:
    """
    Execute one chunk of operations in a single round trip.

    Registration failures are recorded immediately and do not abort the
    chunk. If the commit fails as a whole, every registered operation is
    failed with the transport error while registration failures keep
    their own message. Nothing is committed when no operation registered.

    Args:
        client: Remote list client
        operations: Operations of this chunk

    Returns:
        One OperationResult per operation, in input order
    """
    results: List[Optional[OperationResult]] = [None] * len(operations)

    logger.info(
        "Starting batch execution",
        operation_count=len(operations)
    )

    try:
        transaction = client.open_batch()
    except Exception as e:
        message = _error_message(e, "Failed to open batch transaction")
        logger.error(
            "Failed to open batch transaction",
            operation_count=len(operations),
            error=message
        )
        return [OperationResult.failed(operation, message) for operation in operations]

    # Phase one: register every operation
    registered: List[Tuple[int, ResultSlot]] = []
    for index, operation in enumerate(operations):
        slot = ResultSlot()
        try:
            add_operation_to_batch(operation, transaction, slot)
        except Exception as e:
            message = _error_message(e, "Failed to add operation to batch")
            logger.warning(
                "Failed to queue operation",
                operation_type=operation.operation_type.value,
                list_name=operation.list_name,
                item_id=operation.item_id,
                operation_id=operation.operation_id,
                error=message
            )
            results[index] = OperationResult.failed(operation, message)
        else:
            registered.append((index, slot))

    # Phase two: one round trip, then read the slots back
    if registered:
        try:
            await transaction.commit()
        except Exception as e:
            message = _error_message(e, "Batch execution failed")
            logger.error(
                "Batch execution failed",
                operation_count=len(operations),
                registered_count=len(registered),
                error=message,
                error_type=type(e).__name__
            )
            for index, _ in registered:
                results[index] = OperationResult.failed(operations[index], message)
        else:
            for index, slot in registered:
                operation = operations[index]
                if not slot.resolved:
                    results[index] = OperationResult.failed(
                        operation, "No response received for operation"
                    )
                elif slot.error is not None:
                    results[index] = OperationResult.failed(
                        operation, _error_message(slot.error, "Operation failed")
                    )
                else:
                    results[index] = OperationResult.succeeded(operation, slot.payload)

    failure_count = sum(1 for result in results if not result.success)
    if failure_count:
        logger.warning(
            "Batch completed with failures",
            total_operations=len(results),
            successful=len(results) - failure_count,
            failed=failure_count
        )
    else:
        logger.info(
            "All operations successful",
            total_operations=len(results)
        )

    return results
