"""
Module: list_builder.py
Description: Fluent per-list operation queue.

Every queue call validates the operation's required fields immediately,
so a malformed operation is rejected at enqueue time and never reaches
a grouped transaction.
"""

import itertools
import time
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from ..models.operation import (
    BatchOperation,
    FormFieldValue,
    OperationType,
    require_operation_fields,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)

FormValuesInput = Sequence[Union[FormFieldValue, Dict[str, str], tuple]]


class ListOperationBuilder:
    """
    Queue of operations against one list.

    Attributes:
        list_name: Target list title

    Example:
        >>> builder = ListOperationBuilder("Tasks")
        >>> builder.add({"Title": "A"}).update(7, {"Title": "B"}, etag='W/"1"').delete(9)
        >>> len(builder)
        3
    """

    def __init__(self, list_name: str, sequence: Optional[Iterator[int]] = None):
        """
        Initialize the list builder.

        Args:
            list_name: Target list title
            sequence: Enqueue counter shared with other list builders;
                a private counter is used when None

        Raises:
            ValueError: If list_name is empty
        """
        if not list_name or not isinstance(list_name, str):
            raise ValueError("list_name must be a non-empty string")

        self.list_name = list_name
        self._entries: List[Tuple[int, BatchOperation]] = []
        self._counter = itertools.count()
        self._sequence = sequence if sequence is not None else itertools.count()

    def __len__(self) -> int:
        return len(self._entries)

    def _generate_operation_id(self) -> str:
        return f"{self.list_name}_{next(self._counter)}_{int(time.time() * 1000)}"

    def _push(self, operation_type: OperationType, **fields: Any) -> "ListOperationBuilder":
        operation = BatchOperation(
            list_name=self.list_name,
            operation_type=operation_type,
            **fields
        )
        require_operation_fields(operation)

        operation = operation.model_copy(
            update={"operation_id": self._generate_operation_id()}
        )
        self._entries.append((next(self._sequence), operation))

        logger.debug(
            "Operation queued",
            list_name=self.list_name,
            operation_type=operation_type.value,
            operation_id=operation.operation_id,
            item_id=operation.item_id
        )
        return self

    def add(self, data: Dict[str, Any]) -> "ListOperationBuilder":
        """Queue creation of a new item."""
        return self._push(OperationType.ADD, data=data)

    def update(
        self,
        item_id: int,
        data: Dict[str, Any],
        etag: Optional[str] = None,
    ) -> "ListOperationBuilder":
        """Queue an update of an existing item, conditional on etag when given."""
        return self._push(OperationType.UPDATE, item_id=item_id, data=data, etag=etag)

    def delete(self, item_id: int, etag: Optional[str] = None) -> "ListOperationBuilder":
        """Queue deletion of an item, conditional on etag when given."""
        return self._push(OperationType.DELETE, item_id=item_id, etag=etag)

    def add_validate_update_item_using_path(
        self,
        form_values: FormValuesInput,
        path: str,
    ) -> "ListOperationBuilder":
        """Queue server-side validated creation of an item under path."""
        return self._push(
            OperationType.ADD_VALIDATE_UPDATE_ITEM_USING_PATH,
            form_values=form_values,
            path=path
        )

    def validate_update_list_item(
        self,
        item_id: int,
        form_values: FormValuesInput,
    ) -> "ListOperationBuilder":
        """Queue a server-side validated update of an item."""
        return self._push(
            OperationType.VALIDATE_UPDATE_LIST_ITEM,
            item_id=item_id,
            form_values=form_values
        )

    def get_operations(self) -> List[BatchOperation]:
        """Return a copy of the queued operations."""
        return [operation for _, operation in self._entries]

    def drain(self) -> List[BatchOperation]:
        """Return the queued operations and clear the queue."""
        return [operation for _, operation in self.drain_sequenced()]

    def drain_sequenced(self) -> List[Tuple[int, BatchOperation]]:
        """Return (enqueue sequence, operation) pairs and clear the queue."""
        entries, self._entries = self._entries, []
        return entries
