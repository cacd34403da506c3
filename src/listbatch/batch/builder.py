"""
Module: builder.py
Description: BatchBuilder, the entry point of the batch engine.

Collects operations from one ListOperationBuilder per list, partitions
them into chunks of batch_size and dispatches every chunk as one grouped
transaction, either in order or concurrently. The outcome is always a
BatchResult; only cancellation and misuse raise.

Key Components:
- BatchBuilder: Owns configuration, list builders and the flat buffer
- create_batch_builder(): Factory

Dependencies: asyncio, typing, logger
Author: listbatch maintainers
"""

import asyncio
import itertools
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..client.base import ListClient
from ..errors import BatchCancelledError
from ..models.operation import BatchOperation
from ..models.result import BatchBuilderConfig, BatchResult, OperationResult
from ..utils.batch_helpers import split_into_batches
from ..utils.logger import get_logger
from .dispatcher import execute_batch
from .list_builder import ListOperationBuilder

logger = get_logger(__name__)

ConfigInput = Union[BatchBuilderConfig, Mapping[str, Any], None]


class BatchBuilder:
    """
    Batch operations across one or more lists.

    A BatchBuilder is not safe for concurrent execute() calls; use one
    instance per logical batch session. After execute() returns or raises,
    the builder is empty and can be reused for an independent run.

    Example:
        >>> builder = BatchBuilder(client, {"batch_size": 50})
        >>> builder.list("Tasks").add({"Title": "A"}).delete(9)
        >>> builder.list("Projects").update(3, {"Status": "Done"})
        >>> result = await builder.execute()
        >>> result.success, result.total_operations
        (True, 3)
    """

    def __init__(self, client: ListClient, config: ConfigInput = None):
        """
        Initialize the batch builder.

        Args:
            client: Remote list client used to open grouped transactions
            config: BatchBuilderConfig or mapping of its fields

        Raises:
            ValueError: If client is None or config is invalid
        """
        if client is None:
            raise ValueError("client is required")

        self.client = client
        self._config = self._coerce_config(config)
        self._operations: List[Tuple[int, BatchOperation]] = []
        self._sequence = itertools.count()
        self._list_builders: Dict[str, ListOperationBuilder] = {}
        self._current_list: Optional[str] = None

    @staticmethod
    def _coerce_config(config: ConfigInput) -> BatchBuilderConfig:
        if config is None:
            return BatchBuilderConfig()
        if isinstance(config, BatchBuilderConfig):
            return config.model_copy()
        return BatchBuilderConfig(**dict(config))

    @property
    def pending_operations(self) -> int:
        """Number of operations that the next execute() would run."""
        return len(self._operations) + sum(len(b) for b in self._list_builders.values())

    def list(self, list_name: str) -> ListOperationBuilder:
        """
        Begin (or resume) operations on a specific list.

        Switching away from another list moves that list's queued
        operations into the flat buffer. Every operation carries a
        builder-wide enqueue sequence, so results follow enqueue order even
        when a handle from an earlier list() call is used after switching.

        Args:
            list_name: Target list title

        Returns:
            The ListOperationBuilder for list_name
        """
        if not list_name or not isinstance(list_name, str):
            raise ValueError("list_name must be a non-empty string")

        if self._current_list is not None and self._current_list != list_name:
            self._operations.extend(self._list_builders[self._current_list].drain_sequenced())

        builder = self._list_builders.get(list_name)
        if builder is None:
            builder = ListOperationBuilder(list_name, self._sequence)
            self._list_builders[list_name] = builder

        self._current_list = list_name
        return builder

    def _drain_list_builders(self) -> None:
        for builder in self._list_builders.values():
            self._operations.extend(builder.drain_sequenced())

    def _reset(self) -> None:
        self._operations = []
        self._list_builders = {}
        self._current_list = None

    async def execute(self, cancel_event: Optional[asyncio.Event] = None) -> BatchResult:
        """
        Execute all queued operations.

        In sequential mode cancel_event is checked before every chunk; in
        concurrent mode it is checked once before dispatch starts.

        Args:
            cancel_event: Set it to stop dispatching further chunks

        Returns:
            BatchResult with one OperationResult per queued operation

        Raises:
            BatchCancelledError: If cancel_event was set before all chunks ran
        """
        self._drain_list_builders()
        # Handles kept across list switches can interleave; restore enqueue order
        operations = [operation for _, operation in sorted(self._operations, key=lambda entry: entry[0])]

        try:
            if not operations:
                logger.debug("No operations queued, nothing to execute")
                return BatchResult.empty()

            batches = split_into_batches(operations, self._config.batch_size)

            logger.info(
                "Executing batch operations",
                total_operations=len(operations),
                batch_count=len(batches),
                batch_size=self._config.batch_size,
                enable_concurrency=self._config.enable_concurrency
            )

            if self._config.enable_concurrency:
                self._check_cancelled(cancel_event, 0, len(batches))
                results = await self._execute_concurrently(batches)
            else:
                results = await self._execute_sequentially(batches, cancel_event)

            report = BatchResult.from_results(results)

            logger.info(
                "Batch operations completed",
                total_operations=report.total_operations,
                successful=report.successful_operations,
                failed=report.failed_operations
            )
            return report

        finally:
            self._reset()

    @staticmethod
    def _check_cancelled(
        cancel_event: Optional[asyncio.Event],
        completed_batches: int,
        batch_count: int,
    ) -> None:
        if cancel_event is not None and cancel_event.is_set():
            logger.warning(
                "Batch execution cancelled",
                completed_batches=completed_batches,
                remaining_batches=batch_count - completed_batches
            )
            raise BatchCancelledError(
                f"Batch execution cancelled after {completed_batches} of {batch_count} batches"
            )

    async def _execute_sequentially(
        self,
        batches: List[List[BatchOperation]],
        cancel_event: Optional[asyncio.Event],
    ) -> List[OperationResult]:
        results: List[OperationResult] = []
        for index, batch in enumerate(batches):
            self._check_cancelled(cancel_event, index, len(batches))
            try:
                results.extend(await execute_batch(self.client, batch))
            except Exception as e:
                results.extend(self._fail_batch(batch, e))
        return results

    async def _execute_concurrently(
        self,
        batches: List[List[BatchOperation]],
    ) -> List[OperationResult]:
        outcomes = await asyncio.gather(
            *(execute_batch(self.client, batch) for batch in batches),
            return_exceptions=True
        )

        results: List[OperationResult] = []
        for batch, outcome in zip(batches, outcomes):
            if isinstance(outcome, BaseException):
                results.extend(self._fail_batch(batch, outcome))
            else:
                results.extend(outcome)
        return results

    @staticmethod
    def _fail_batch(
        batch: Sequence[BatchOperation],
        error: BaseException,
    ) -> List[OperationResult]:
        message = str(error) or "Batch execution failed"
        logger.error(
            "Batch chunk failed",
            operation_count=len(batch),
            error=message,
            error_type=type(error).__name__
        )
        return [OperationResult.failed(operation, message) for operation in batch]

    def get_config(self) -> BatchBuilderConfig:
        """Return a copy of the current configuration."""
        return self._config.model_copy()

    def update_config(
        self,
        config: ConfigInput = None,
        **overrides: Any,
    ) -> "BatchBuilder":
        """
        Update batch size and/or concurrency mode.

        Queued operations keep their identifiers; only future partitioning
        is affected.

        Args:
            config: BatchBuilderConfig or mapping with fields to change
            **overrides: Individual fields to change

        Returns:
            self, for chaining
        """
        updates: Dict[str, Any] = {}
        if isinstance(config, BatchBuilderConfig):
            updates.update(config.model_dump(exclude_unset=True))
        elif config is not None:
            updates.update(dict(config))
        updates.update(overrides)

        self._config = BatchBuilderConfig(**{**self._config.model_dump(), **updates})
        return self


def create_batch_builder(client: ListClient, config: ConfigInput = None) -> BatchBuilder:
    """Create a BatchBuilder for client."""
    return BatchBuilder(client, config)
