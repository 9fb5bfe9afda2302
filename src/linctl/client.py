"""GraphQL transport for the Linear API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar
from urllib.parse import urlparse

import httpx
import orjson

from linctl.constants import API_ENDPOINT, ASSET_HOSTS, HTTP_TIMEOUT_SECS
from linctl.errors import (
    ApiStatusError,
    DownloadFailedError,
    EmptyResponseError,
    GraphQLError,
    ResponseShapeError,
    TransportError,
    UploadFailedError,
)

if TYPE_CHECKING:
    from types import TracebackType

    from linctl.queries import Operation

T = TypeVar("T")

logger = logging.getLogger(__name__)


def is_service_asset_url(url: str) -> bool:
    """Check whether *url* is hosted on the service's own asset domains."""
    host = (urlparse(url).hostname or "").lower()
    return any(host == h or host.endswith(f".{h}") for h in ASSET_HOSTS)


class LinearClient:
    """Sends GraphQL operations and asset transfers with one credential.

    A single failed call raises immediately; nothing is retried.
    """

    def __init__(
        self,
        api_key: str,
        endpoint: str = API_ENDPOINT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Credential sent in the Authorization header
            endpoint: GraphQL endpoint URL
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self._api_key = api_key
        self.endpoint = endpoint
        self._http = httpx.Client(
            timeout=HTTP_TIMEOUT_SECS,
            transport=transport,
            follow_redirects=True,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> LinearClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def execute(
        self,
        operation: Operation[T],
        variables: dict[str, Any] | None = None,
    ) -> T:
        """Run one GraphQL operation and decode its result.

        Raises:
            TransportError: Network failure or a non-JSON body
            ApiStatusError: Non-2xx HTTP status
            GraphQLError: The envelope carries an ``errors`` list
            EmptyResponseError: 2xx with no ``data``
            ResponseShapeError: ``data`` does not fit the operation
        """
        payload: dict[str, Any] = {
            "query": operation.document,
            "operationName": operation.name,
        }
        if variables is not None:
            payload["variables"] = variables

        logger.debug("POST %s (%s)", self.endpoint, operation.name)
        try:
            response = self._http.post(
                self.endpoint,
                content=orjson.dumps(payload),
                headers={
                    "Authorization": self._api_key,
                    "Content-Type": "application/json",
                },
            )
        except httpx.RequestError as e:
            msg = f"HTTP request failed: {e}"
            raise TransportError(msg) from e

        if not response.is_success:
            raise ApiStatusError(response.status_code, response.text)

        try:
            envelope = orjson.loads(response.content)
        except orjson.JSONDecodeError as e:
            msg = f"Invalid JSON in response to {operation.name}"
            raise TransportError(msg) from e
        if not isinstance(envelope, dict):
            raise ResponseShapeError(operation.name, "envelope is not an object")

        errors = envelope.get("errors")
        if errors:
            raise GraphQLError(
                [
                    err.get("message", str(err)) if isinstance(err, dict) else str(err)
                    for err in errors
                ],
            )

        data = envelope.get("data")
        if data is None:
            raise EmptyResponseError

        try:
            return operation.decode(data)
        except (KeyError, TypeError, ValueError) as e:
            raise ResponseShapeError(operation.name, repr(e)) from e

    def fetch_asset(self, url: str) -> bytes:
        """Download an asset body.

        The credential is attached only for the service's own asset hosts.

        Raises:
            TransportError: Network failure
            DownloadFailedError: Non-2xx status
        """
        headers = {"Authorization": self._api_key} if is_service_asset_url(url) else {}
        logger.debug("GET %s (authenticated=%s)", url, bool(headers))
        try:
            response = self._http.get(url, headers=headers)
        except httpx.RequestError as e:
            msg = f"HTTP request failed: {e}"
            raise TransportError(msg) from e
        if not response.is_success:
            raise DownloadFailedError(url, response.status_code)
        return response.content

    def put_asset(self, url: str, content: bytes, headers: dict[str, str]) -> None:
        """Upload raw bytes to a signed target.

        Raises:
            TransportError: Network failure
            UploadFailedError: Non-2xx status
        """
        logger.debug("PUT %s (%d bytes)", url, len(content))
        try:
            response = self._http.put(url, content=content, headers=headers)
        except httpx.RequestError as e:
            msg = f"HTTP request failed: {e}"
            raise TransportError(msg) from e
        if not response.is_success:
            raise UploadFailedError(response.status_code, response.text)
