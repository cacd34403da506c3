"""
Module: conftest.py
Description: Shared pytest fixtures for listbatch tests.

Provides an in-memory list client that records every grouped transaction
and can be told to fail round trips or reject individual items, plus
reusable sample data.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional

import pytest
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from listbatch.errors import BatchTransportError, RemoteOperationError


class TestSettings(BaseSettings):
    """Test settings that don't read the environment or .env files."""

    model_config = SettingsConfigDict(
        env_file=None,
        case_sensitive=False,
        extra="ignore"
    )

    site_url: str = Field(default="https://lists.example.test/sites/ops")
    access_token: str = Field(default="test-token")
    request_timeout: int = Field(default=5)
    max_retries: int = Field(default=2)
    retry_delay_seconds: float = Field(default=0.0)


class FakeBatchTransaction:
    """Grouped transaction that records calls and resolves them on commit."""

    def __init__(self, client: "FakeListClient"):
        self.client = client
        self.calls: List[Dict[str, Any]] = []
        self.committed = False

    def _register(self, method: str, on_complete, **kwargs) -> None:
        self.calls.append({"method": method, "on_complete": on_complete, **kwargs})

    def add_item(self, list_name, data, *, on_complete):
        self._register("add_item", on_complete, list_name=list_name, data=data)

    def update_item(self, list_name, item_id, data, *, on_complete, etag=None):
        self._register(
            "update_item", on_complete,
            list_name=list_name, item_id=item_id, data=data, etag=etag
        )

    def delete_item(self, list_name, item_id, *, on_complete, etag=None):
        self._register("delete_item", on_complete, list_name=list_name, item_id=item_id, etag=etag)

    def add_validate_update_item_using_path(self, list_name, form_values, path, *, on_complete):
        self._register(
            "add_validate_update_item_using_path", on_complete,
            list_name=list_name, form_values=form_values, path=path
        )

    def validate_update_list_item(self, list_name, item_id, form_values, *, on_complete):
        self._register(
            "validate_update_list_item", on_complete,
            list_name=list_name, item_id=item_id, form_values=form_values
        )

    async def commit(self) -> None:
        client = self.client
        client.commit_count += 1
        client.in_flight += 1
        client.max_in_flight = max(client.max_in_flight, client.in_flight)
        try:
            if client.commit_delay:
                await asyncio.sleep(client.commit_delay)

            if client.on_commit is not None:
                client.on_commit(self)

            if any(call["list_name"] in client.failing_lists for call in self.calls):
                raise BatchTransportError("Network unreachable")

            self.committed = True
            for call in self.calls:
                item_id = call.get("item_id")
                if item_id in client.rejected_item_ids:
                    call["on_complete"](
                        None,
                        RemoteOperationError(client.rejected_item_ids[item_id], status_code=412)
                    )
                elif item_id in client.silent_item_ids:
                    continue
                else:
                    call["on_complete"](
                        {"method": call["method"], "list_name": call["list_name"], "item_id": item_id},
                        None
                    )
        finally:
            client.in_flight -= 1


class FakeListClient:
    """
    In-memory ListClient.

    Attributes:
        transactions: Every transaction opened, in order
        commit_count: Number of commit() calls
        max_in_flight: Highest number of overlapping commits observed
    """

    def __init__(
        self,
        failing_lists=(),
        rejected_item_ids: Optional[Dict[int, str]] = None,
        silent_item_ids=(),
        commit_delay: float = 0.0,
        open_error: Optional[Exception] = None,
        on_commit: Optional[Callable[[FakeBatchTransaction], None]] = None,
    ):
        self.failing_lists = set(failing_lists)
        self.rejected_item_ids = dict(rejected_item_ids or {})
        self.silent_item_ids = set(silent_item_ids)
        self.commit_delay = commit_delay
        self.open_error = open_error
        self.on_commit = on_commit
        self.transactions: List[FakeBatchTransaction] = []
        self.commit_count = 0
        self.in_flight = 0
        self.max_in_flight = 0

    def open_batch(self) -> FakeBatchTransaction:
        if self.open_error is not None:
            raise self.open_error
        transaction = FakeBatchTransaction(self)
        self.transactions.append(transaction)
        return transaction


@pytest.fixture
def test_settings():
    """Provide test configuration settings."""
    return TestSettings()


@pytest.fixture
def fake_client():
    """Provide an in-memory list client that accepts every call."""
    return FakeListClient()


@pytest.fixture
def client_factory():
    """
    Factory fixture creating configured in-memory list clients.

    Usage:
        client = client_factory(failing_lists={"Projects"}, rejected_item_ids={7: "Stale"})
    """
    def _create(**kwargs) -> FakeListClient:
        return FakeListClient(**kwargs)

    return _create


@pytest.fixture
def sample_form_values():
    """Form values for validated writes."""
    return [
        {"field_name": "Title", "field_value": "Quarterly review"},
        {"field_name": "DueDate", "field_value": "2024-03-31"},
    ]
