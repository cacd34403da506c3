"""
Module: test_rest.py
Description: Unit tests for the HTTP list client.

Uses httpx.MockTransport to stand in for the remote batch endpoint.
"""

import json

import httpx
import pytest

from listbatch.batch.builder import BatchBuilder
from listbatch.client.rest import RestListClient, extract_error_message
from listbatch.errors import BatchTransportError, RemoteOperationError
from listbatch.models.operation import FormFieldValue


def echo_handler(captured):
    """Answer every sub-request with 201 and record the envelope."""
    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        captured.append((request, payload))
        return httpx.Response(200, json={
            "responses": [
                {"id": r["id"], "status": 201, "body": {"Id": int(r["id"]) * 10}}
                for r in payload["requests"]
            ]
        })
    return handler


def make_client(handler, test_settings, **kwargs) -> RestListClient:
    return RestListClient(
        site_url=test_settings.site_url,
        access_token=test_settings.access_token,
        max_retries=test_settings.max_retries,
        retry_delay=test_settings.retry_delay_seconds,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        **kwargs
    )


class TestExtractErrorMessage:
    """Test cases for extract_error_message()."""

    @pytest.mark.parametrize("body,expected", [
        ({"message": "Item not found"}, "Item not found"),
        ({"error": {"message": "Conflict"}}, "Conflict"),
        ({"error": {"code": "-1", "message": {"lang": "en-US", "value": "Version conflict"}}},
         "Version conflict"),
        ({"error_description": "Token expired"}, "Token expired"),
        ({"error": "Bad request"}, "Bad request"),
        (None, "Operation failed"),
        ("", "Operation failed"),
        ("plain text", "plain text"),
    ])
    def test_formats(self, body, expected):
        """Test message extraction from the supported body shapes."""
        assert extract_error_message(body) == expected


class TestRestListClientInit:
    """Test cases for client construction."""

    def test_rejects_empty_site_url(self):
        """Test a site URL is required."""
        with pytest.raises(ValueError, match="site_url must be a non-empty string"):
            RestListClient(site_url="")

    def test_rejects_non_http_site_url(self):
        """Test non-HTTP URLs are rejected."""
        with pytest.raises(ValueError, match="valid HTTP/HTTPS URL"):
            RestListClient(site_url="ftp://lists.example.test")

    def test_batch_url(self):
        """Test the batch URL is derived from the site URL."""
        client = RestListClient(site_url="https://lists.example.test/sites/ops/")
        assert client.batch_url == "https://lists.example.test/sites/ops/$batch"


class TestRestBatchTransaction:
    """Test cases for request building and response routing."""

    @pytest.mark.asyncio
    async def test_request_envelope(self, test_settings):
        """Test each operation becomes one sub-request."""
        captured = []
        client = make_client(echo_handler(captured), test_settings)
        transaction = client.open_batch()
        outcomes = []
        record = lambda payload, error: outcomes.append((payload, error))

        transaction.add_item("Team Tasks", {"Title": "A"}, on_complete=record)
        transaction.update_item("Tasks", 7, {"Title": "B"}, on_complete=record, etag='W/"3"')
        transaction.delete_item("Tasks", 9, on_complete=record)
        transaction.add_validate_update_item_using_path(
            "Documents", [FormFieldValue(field_name="Title", field_value="A")], "/Documents/2024",
            on_complete=record
        )
        transaction.validate_update_list_item(
            "Tasks", 4, [FormFieldValue(field_name="Status", field_value="Done")], on_complete=record
        )
        assert len(transaction) == 5

        await transaction.commit()

        request, payload = captured[0]
        assert str(request.url) == "https://lists.example.test/sites/ops/$batch"
        assert request.headers["Authorization"] == "Bearer test-token"

        add, update, delete, add_path, validate = payload["requests"]
        assert [r["id"] for r in payload["requests"]] == ["1", "2", "3", "4", "5"]
        assert add["method"] == "POST"
        assert add["url"] == "lists/Team%20Tasks/items"
        assert add["body"] == {"Title": "A"}
        assert update["method"] == "PATCH"
        assert update["url"] == "lists/Tasks/items/7"
        assert update["headers"]["If-Match"] == 'W/"3"'
        assert delete["method"] == "DELETE"
        assert delete["headers"]["If-Match"] == "*"
        assert "body" not in delete
        assert add_path["url"] == "lists/Documents/AddValidateUpdateItemUsingPath"
        assert add_path["body"]["listItemCreateInfo"]["FolderPath"]["DecodedUrl"] == "/Documents/2024"
        assert add_path["body"]["formValues"] == [{"FieldName": "Title", "FieldValue": "A"}]
        assert validate["url"] == "lists/Tasks/items/4/ValidateUpdateListItem"
        assert validate["body"]["bNewDocumentUpdate"] is False

        assert outcomes == [({"Id": 10}, None), ({"Id": 20}, None), ({"Id": 30}, None),
                            ({"Id": 40}, None), ({"Id": 50}, None)]

    @pytest.mark.asyncio
    async def test_failed_and_missing_responses(self, test_settings):
        """Test error statuses and missing entries resolve with errors."""
        def handler(request):
            return httpx.Response(200, json={"responses": [
                {"id": "1", "status": 412, "body": {"error": {"message": "Version conflict"}}},
            ]})

        client = make_client(handler, test_settings)
        transaction = client.open_batch()
        outcomes = {}
        transaction.delete_item("Tasks", 1, on_complete=lambda p, e: outcomes.__setitem__(1, e))
        transaction.delete_item("Tasks", 2, on_complete=lambda p, e: outcomes.__setitem__(2, e))

        await transaction.commit()

        assert isinstance(outcomes[1], RemoteOperationError)
        assert str(outcomes[1]) == "Version conflict"
        assert outcomes[1].status_code == 412
        assert str(outcomes[2]) == "No response returned for request"

    @pytest.mark.asyncio
    async def test_malformed_status_fails_only_its_request(self, test_settings):
        """Test an unparseable status does not affect other sub-responses."""
        def handler(request):
            return httpx.Response(200, json={"responses": [
                {"id": "1", "status": 201, "body": {"Id": 1}},
                {"id": "2", "status": None, "body": {}},
                {"id": "3", "status": "created", "body": {}},
                {"id": "4", "status": 204, "body": None},
            ]})

        client = make_client(handler, test_settings)
        transaction = client.open_batch()
        outcomes = {}
        for item_id in (1, 2, 3, 4):
            transaction.delete_item(
                "Tasks", item_id,
                on_complete=lambda p, e, item_id=item_id: outcomes.__setitem__(item_id, (p, e))
            )

        await transaction.commit()

        assert outcomes[1] == ({"Id": 1}, None)
        assert str(outcomes[2][1]) == "Invalid status in batch response"
        assert str(outcomes[3][1]) == "Invalid status in batch response"
        assert outcomes[4] == (None, None)

    @pytest.mark.asyncio
    async def test_commit_once(self, test_settings):
        """Test a transaction cannot be reused after commit."""
        client = make_client(echo_handler([]), test_settings)
        transaction = client.open_batch()
        transaction.delete_item("Tasks", 1, on_complete=lambda p, e: None)
        await transaction.commit()

        with pytest.raises(RuntimeError):
            await transaction.commit()
        with pytest.raises(RuntimeError):
            transaction.delete_item("Tasks", 2, on_complete=lambda p, e: None)

    @pytest.mark.asyncio
    async def test_empty_commit_skips_round_trip(self, test_settings):
        """Test committing nothing sends nothing."""
        captured = []
        transaction = make_client(echo_handler(captured), test_settings).open_batch()

        await transaction.commit()

        assert captured == []

    @pytest.mark.asyncio
    async def test_invalid_envelope(self, test_settings):
        """Test a response without a responses list fails the round trip."""
        client = make_client(lambda request: httpx.Response(200, json={"value": []}), test_settings)
        transaction = client.open_batch()
        transaction.delete_item("Tasks", 1, on_complete=lambda p, e: None)

        with pytest.raises(BatchTransportError, match="missing 'responses' list"):
            await transaction.commit()


class TestSendBatch:
    """Test cases for the HTTP round trip and retries."""

    @pytest.mark.asyncio
    async def test_retries_throttling(self, test_settings):
        """Test 429 responses are retried until success."""
        attempts = []

        def handler(request):
            attempts.append(request)
            if len(attempts) < 3:
                return httpx.Response(429)
            return httpx.Response(200, json={"responses": []})

        client = make_client(handler, test_settings)

        assert await client.send_batch({"requests": []}) == {"responses": []}
        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_retries_exhausted(self, test_settings):
        """Test persistent 503 responses raise after max_retries."""
        attempts = []

        def handler(request):
            attempts.append(request)
            return httpx.Response(503)

        client = make_client(handler, test_settings)

        with pytest.raises(BatchTransportError, match="status 503"):
            await client.send_batch({"requests": []})
        assert len(attempts) == test_settings.max_retries + 1

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self, test_settings):
        """Test non-retryable status codes fail immediately."""
        attempts = []

        def handler(request):
            attempts.append(request)
            return httpx.Response(401, json={"error": "unauthorized"})

        client = make_client(handler, test_settings)

        with pytest.raises(BatchTransportError, match="status 401"):
            await client.send_batch({"requests": []})
        assert len(attempts) == 1

    @pytest.mark.asyncio
    async def test_network_error(self, test_settings):
        """Test connection failures become transport errors after retries."""
        attempts = []

        def handler(request):
            attempts.append(request)
            raise httpx.ConnectError("Connection refused", request=request)

        client = make_client(handler, test_settings)

        with pytest.raises(BatchTransportError, match="Connection refused"):
            await client.send_batch({"requests": []})
        assert len(attempts) == test_settings.max_retries + 1

    @pytest.mark.asyncio
    async def test_non_json_body(self, test_settings):
        """Test an unparseable response body is a transport error."""
        client = make_client(lambda request: httpx.Response(200, text="<html/>"), test_settings)

        with pytest.raises(BatchTransportError, match="not JSON"):
            await client.send_batch({"requests": []})


class TestBuilderOverRest:
    """End-to-end run through BatchBuilder and the HTTP client."""

    @pytest.mark.asyncio
    async def test_mixed_outcomes(self, test_settings):
        """Test per-item failures surface as failed results."""
        def handler(request):
            payload = json.loads(request.content)
            responses = []
            for r in payload["requests"]:
                if r["method"] == "DELETE":
                    responses.append({"id": r["id"], "status": 404,
                                      "body": {"error": {"message": "Item does not exist"}}})
                else:
                    responses.append({"id": r["id"], "status": 201, "body": {"Id": 1}})
            return httpx.Response(200, json={"responses": responses})

        builder = BatchBuilder(make_client(handler, test_settings))
        builder.list("Tasks").add({"Title": "A"}).delete(99)

        result = await builder.execute()

        assert result.successful_operations == 1
        assert result.failed_operations == 1
        assert result.results[0].data == {"Id": 1}
        assert result.errors[0].error == "Item does not exist"

    @pytest.mark.asyncio
    async def test_malformed_status_keeps_committed_results(self, test_settings):
        """Test an operation the server accepted stays successful next to a bad entry."""
        def handler(request):
            return httpx.Response(200, json={"responses": [
                {"id": "1", "status": 201, "body": {"Id": 1}},
                {"id": "2", "status": None, "body": {}},
            ]})

        builder = BatchBuilder(make_client(handler, test_settings))
        builder.list("Tasks").add({"Title": "A"}).delete(5)

        result = await builder.execute()

        assert result.results[0].success is True
        assert result.results[0].data == {"Id": 1}
        assert result.results[1].success is False
        assert result.results[1].error == "Invalid status in batch response"

    @pytest.mark.asyncio
    async def test_transport_failure_fails_chunk(self, test_settings):
        """Test a failed round trip fails every operation of the chunk."""
        builder = BatchBuilder(make_client(lambda request: httpx.Response(500), test_settings))
        builder.list("Tasks").add({"Title": "A"}).delete(5)

        result = await builder.execute()

        assert result.failed_operations == 2
        assert all(e.error == "Batch request failed with status 500" for e in result.errors)
