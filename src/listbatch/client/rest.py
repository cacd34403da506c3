"""
Module: rest.py
Description: HTTP list client for a JSON batch endpoint.

Implements ListClient over httpx. Every registered call becomes one entry
of a JSON batch request posted to {site_url}/$batch; the per-entry
responses are routed back to the callbacks given at registration.

Key Components:
- RestListClient: Opens transactions and performs the round trip
- RestBatchTransaction: Collects requests and resolves callbacks on commit
- extract_error_message(): Pulls a readable message out of an error body

Dependencies: httpx, tenacity, urllib, typing
Author: listbatch maintainers
"""

from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

import httpx

from ..config.settings import settings
from ..errors import BatchTransportError, RemoteOperationError
from ..models.operation import FormFieldValue
from ..utils.logger import get_logger
from .base import RequestCallback
from .retry import batch_retry

logger = get_logger(__name__)


def extract_error_message(body: Any) -> str:
    """
    Extract an error message from a failed sub-response body.

    Understands flat {"message": ...} bodies as well as nested
    {"error": {"message": ...}} and {"error": {"message": {"value": ...}}}.

    Args:
        body: Decoded response body

    Returns:
        Human-readable message
    """
    if isinstance(body, dict):
        for error_field in ["message", "error_description", "error"]:
            if error_field not in body:
                continue
            value = body[error_field]
            if isinstance(value, dict):
                message = value.get("message", value)
                if isinstance(message, dict):
                    return str(message.get("value", message))
                return str(message)
            return str(value)

    if body is None or body == "":
        return "Operation failed"
    return str(body)


class RestBatchTransaction:
    """
    Grouped transaction for RestListClient.

    Requests are numbered in registration order. commit() may be called
    once; registering after commit raises RuntimeError.
    """

    def __init__(self, client: "RestListClient"):
        self._client = client
        self._requests: List[Dict[str, Any]] = []
        self._callbacks: Dict[str, RequestCallback] = {}
        self._committed = False

    def __len__(self) -> int:
        return len(self._requests)

    @staticmethod
    def _list_url(list_name: str) -> str:
        return f"lists/{quote(list_name, safe='')}"

    @staticmethod
    def _form_values_body(form_values: Sequence[FormFieldValue]) -> List[Dict[str, str]]:
        return [value.model_dump(by_alias=True) for value in form_values]

    def _register(
        self,
        method: str,
        url: str,
        on_complete: RequestCallback,
        body: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> str:
        if self._committed:
            raise RuntimeError("Batch transaction already committed")

        request_id = str(len(self._requests) + 1)
        request: Dict[str, Any] = {
            "id": request_id,
            "method": method,
            "url": url,
            "headers": {"Content-Type": "application/json", **(headers or {})},
        }
        if body is not None:
            request["body"] = body

        self._requests.append(request)
        self._callbacks[request_id] = on_complete

        logger.debug(
            "Request registered in batch",
            request_id=request_id,
            method=method,
            url=url
        )
        return request_id

    def add_item(self, list_name, data, *, on_complete):
        self._register("POST", f"{self._list_url(list_name)}/items", on_complete, body=dict(data))

    def update_item(self, list_name, item_id, data, *, on_complete, etag=None):
        self._register(
            "PATCH",
            f"{self._list_url(list_name)}/items/{item_id}",
            on_complete,
            body=dict(data),
            headers={"If-Match": etag or "*"}
        )

    def delete_item(self, list_name, item_id, *, on_complete, etag=None):
        self._register(
            "DELETE",
            f"{self._list_url(list_name)}/items/{item_id}",
            on_complete,
            headers={"If-Match": etag or "*"}
        )

    def add_validate_update_item_using_path(self, list_name, form_values, path, *, on_complete):
        body = {
            "listItemCreateInfo": {
                "FolderPath": {"DecodedUrl": path},
                "UnderlyingObjectType": 0,
            },
            "formValues": self._form_values_body(form_values),
            "bNewDocumentUpdate": False,
        }
        self._register(
            "POST",
            f"{self._list_url(list_name)}/AddValidateUpdateItemUsingPath",
            on_complete,
            body=body
        )

    def validate_update_list_item(self, list_name, item_id, form_values, *, on_complete):
        body = {
            "formValues": self._form_values_body(form_values),
            "bNewDocumentUpdate": False,
        }
        self._register(
            "POST",
            f"{self._list_url(list_name)}/items/{item_id}/ValidateUpdateListItem",
            on_complete,
            body=body
        )

    async def commit(self) -> None:
        """
        Send every registered request in one round trip.

        Raises:
            RuntimeError: If the transaction was already committed
            BatchTransportError: If the round trip fails as a whole
        """
        if self._committed:
            raise RuntimeError("Batch transaction already committed")
        self._committed = True

        if not self._requests:
            return

        raw_response = await self._client.send_batch({"requests": self._requests})

        responses = raw_response.get("responses") if isinstance(raw_response, dict) else None
        if not isinstance(responses, list):
            raise BatchTransportError("Invalid batch response: missing 'responses' list")

        responses_by_id = {
            str(response.get("id")): response
            for response in responses
            if isinstance(response, dict)
        }

        for request_id, on_complete in self._callbacks.items():
            response = responses_by_id.get(request_id)
            if response is None:
                on_complete(None, RemoteOperationError("No response returned for request"))
                continue

            try:
                status_code = int(response.get("status"))
            except (TypeError, ValueError):
                logger.warning(
                    "Invalid status in batch response",
                    request_id=request_id,
                    status=repr(response.get("status"))
                )
                on_complete(None, RemoteOperationError("Invalid status in batch response"))
                continue

            body = response.get("body")
            if 200 <= status_code < 300:
                on_complete(body, None)
            else:
                on_complete(
                    None,
                    RemoteOperationError(extract_error_message(body), status_code=status_code)
                )


class RestListClient:
    """
    List client for a JSON batch endpoint.

    Attributes:
        site_url: Base URL of the remote site
        batch_url: URL the batch envelope is posted to
        max_retries: Retries for a failed round trip
        retry_delay: Base delay for exponential backoff

    Example:
        >>> client = RestListClient("https://contoso.example/sites/ops", access_token="...")
        >>> result = await BatchBuilder(client).list("Tasks").add({"Title": "A"}) ...
    """

    def __init__(
        self,
        site_url: Optional[str] = None,
        access_token: Optional[str] = None,
        timeout_seconds: Optional[int] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the list client.

        Unset arguments fall back to the global settings.

        Args:
            site_url: Base URL of the remote site
            access_token: Bearer token for the Authorization header
            timeout_seconds: HTTP timeout in seconds
            max_retries: Retries for a failed round trip
            retry_delay: Base delay for exponential backoff in seconds
            http_client: Shared AsyncClient; a short-lived one is used when None

        Raises:
            ValueError: If site_url is not an HTTP(S) URL
        """
        site_url = site_url if site_url is not None else settings.site_url
        if not site_url or not isinstance(site_url, str):
            raise ValueError("site_url must be a non-empty string")
        if not site_url.startswith(('http://', 'https://')):
            raise ValueError("site_url must be a valid HTTP/HTTPS URL")

        self.site_url = site_url.rstrip('/')
        self.batch_url = f"{self.site_url}/$batch"
        self.access_token = access_token if access_token is not None else settings.access_token
        timeout_seconds = timeout_seconds if timeout_seconds is not None else settings.request_timeout
        self.timeout = httpx.Timeout(timeout_seconds, connect=timeout_seconds)
        self.max_retries = max_retries if max_retries is not None else settings.max_retries
        self.retry_delay = retry_delay if retry_delay is not None else settings.retry_delay_seconds
        self._http_client = http_client

        logger.info(
            "List client initialized",
            site_url=self.site_url,
            timeout_seconds=timeout_seconds,
            max_retries=self.max_retries
        )

    def open_batch(self) -> RestBatchTransaction:
        """Open a new grouped transaction."""
        return RestBatchTransaction(self)

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    async def send_batch(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Post a batch envelope and return the decoded response.

        Args:
            payload: {"requests": [...]} envelope

        Returns:
            Decoded JSON response

        Raises:
            BatchTransportError: If the round trip fails after all retries
        """
        if self._http_client is not None:
            return await self._send_with_retry(self._http_client, payload)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await self._send_with_retry(client, payload)

    async def _send_with_retry(
        self,
        client: httpx.AsyncClient,
        payload: Dict[str, Any],
    ) -> Dict[str, Any]:
        request_count = len(payload.get("requests", []))

        try:
            async for attempt in batch_retry(self.max_retries, self.retry_delay):
                with attempt:
                    response = await client.post(
                        self.batch_url,
                        json=payload,
                        headers=self._headers(),
                        timeout=self.timeout
                    )
                    response.raise_for_status()

        except httpx.HTTPStatusError as e:
            logger.error(
                "Batch request HTTP error",
                batch_url=self.batch_url,
                status_code=e.response.status_code,
                response=e.response.text[:500],
                request_count=request_count
            )
            raise BatchTransportError(
                f"Batch request failed with status {e.response.status_code}"
            ) from e

        except httpx.HTTPError as e:
            logger.error(
                "Batch request transport error",
                batch_url=self.batch_url,
                error=str(e),
                error_type=type(e).__name__,
                request_count=request_count
            )
            raise BatchTransportError(f"Batch request failed: {e}") from e

        try:
            decoded = response.json()
        except ValueError as e:
            raise BatchTransportError("Invalid batch response: body is not JSON") from e

        logger.debug(
            "Batch round trip completed",
            batch_url=self.batch_url,
            status_code=response.status_code,
            request_count=request_count
        )
        return decoded
