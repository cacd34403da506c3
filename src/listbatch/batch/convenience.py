"""
Module: convenience.py
Description: Ready-to-use wrappers around BatchBuilder.
"""

from typing import Dict, List, Optional, Sequence

from ..client.base import ListClient
from ..models.operation import BatchOperation, OperationType
from ..models.result import BatchBuilderConfig, BatchResult
from ..utils.logger import get_logger
from .builder import BatchBuilder, ConfigInput
from .dispatcher import execute_batch
from .list_builder import ListOperationBuilder

logger = get_logger(__name__)


async def execute_batch_operations(
    client: ListClient,
    operations: Sequence[BatchOperation],
    config: ConfigInput = None,
) -> BatchResult:
    """
    Execute plain operations without using the builder API directly.

    Operations are re-queued through a fresh BatchBuilder, which assigns new
    operation IDs. Operations missing a required field are skipped with a
    warning and do not appear in the result.

    Args:
        client: Remote list client
        operations: Operations to execute
        config: Optional builder configuration

    Returns:
        BatchResult for the queued operations
    """
    builder = BatchBuilder(client, config)

    for index, op in enumerate(operations):
        list_builder = builder.list(op.list_name)
        try:
            if op.operation_type == OperationType.ADD:
                list_builder.add(op.data)
            elif op.operation_type == OperationType.UPDATE:
                list_builder.update(op.item_id, op.data, op.etag)
            elif op.operation_type == OperationType.DELETE:
                list_builder.delete(op.item_id, op.etag)
            elif op.operation_type == OperationType.ADD_VALIDATE_UPDATE_ITEM_USING_PATH:
                list_builder.add_validate_update_item_using_path(op.form_values, op.path)
            elif op.operation_type == OperationType.VALIDATE_UPDATE_LIST_ITEM:
                list_builder.validate_update_list_item(op.item_id, op.form_values)
        except ValueError as e:
            logger.warning(
                "Skipping invalid operation",
                index=index,
                list_name=op.list_name,
                operation_type=op.operation_type.value,
                error=str(e)
            )

    return await builder.execute()


async def execute_single_batch(
    client: ListClient,
    operations: Sequence[BatchOperation],
) -> BatchResult:
    """
    Execute operations as exactly one grouped transaction, bypassing BatchBuilder.

    Args:
        client: Remote list client
        operations: Operations to execute

    Returns:
        BatchResult for the operations
    """
    if not operations:
        return BatchResult.empty()
    return BatchResult.from_results(await execute_batch(client, list(operations)))


class MultiListBuilder:
    """
    One ListOperationBuilder per list name, sharing a single BatchBuilder.

    Attributes:
        builders: List name -> ListOperationBuilder
    """

    def __init__(self, builder: BatchBuilder, builders: Dict[str, ListOperationBuilder]):
        self._builder = builder
        self.builders = builders

    def __getitem__(self, list_name: str) -> ListOperationBuilder:
        return self.builders[list_name]

    async def execute(self) -> BatchResult:
        return await self._builder.execute()

    def get_config(self) -> BatchBuilderConfig:
        return self._builder.get_config()

    def update_config(self, config: ConfigInput = None, **overrides) -> "MultiListBuilder":
        self._builder.update_config(config, **overrides)
        return self


def create_multi_list_builder(
    client: ListClient,
    list_names: List[str],
    config: Optional[ConfigInput] = None,
) -> MultiListBuilder:
    """
    Create list builders for several lists at once.

    Args:
        client: Remote list client
        list_names: Lists to create builders for
        config: Optional builder configuration

    Returns:
        MultiListBuilder exposing the per-list builders
    """
    builder = BatchBuilder(client, config)
    builders = {list_name: builder.list(list_name) for list_name in list_names}
    return MultiListBuilder(builder, builders)
