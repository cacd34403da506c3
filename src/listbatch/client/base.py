"""
Module: base.py
Description: Remote list client protocols.

The batch engine only talks to the remote service through these two
protocols. A transaction defers every registered call and fires them
together in a single round trip on commit(), then reports each call's
outcome through the on_complete callback given at registration.
"""

from typing import Any, Callable, Dict, Optional, Protocol, Sequence

from ..models.operation import FormFieldValue

# Invoked once per registered call after commit: (payload, None) on success,
# (None, error) when the remote service reported a failure.
RequestCallback = Callable[[Any, Optional[BaseException]], None]


class BatchTransaction(Protocol):
    """Grouped transaction collecting list calls for one round trip."""

    def add_item(
        self,
        list_name: str,
        data: Dict[str, Any],
        *,
        on_complete: RequestCallback,
    ) -> None:
        """Register creation of a new item."""
        ...

    def update_item(
        self,
        list_name: str,
        item_id: int,
        data: Dict[str, Any],
        *,
        on_complete: RequestCallback,
        etag: Optional[str] = None,
    ) -> None:
        """Register an update; unconditional when etag is None."""
        ...

    def delete_item(
        self,
        list_name: str,
        item_id: int,
        *,
        on_complete: RequestCallback,
        etag: Optional[str] = None,
    ) -> None:
        """Register a delete; unconditional when etag is None."""
        ...

    def add_validate_update_item_using_path(
        self,
        list_name: str,
        form_values: Sequence[FormFieldValue],
        path: str,
        *,
        on_complete: RequestCallback,
    ) -> None:
        """Register server-side validated creation at a folder path."""
        ...

    def validate_update_list_item(
        self,
        list_name: str,
        item_id: int,
        form_values: Sequence[FormFieldValue],
        *,
        on_complete: RequestCallback,
    ) -> None:
        """Register a server-side validated update."""
        ...

    async def commit(self) -> None:
        """Perform the round trip; raises if the transport fails as a whole."""
        ...


class ListClient(Protocol):
    """Remote list client able to open grouped transactions."""

    def open_batch(self) -> BatchTransaction:
        """Open a new grouped transaction. Must be safe to call concurrently."""
        ...
