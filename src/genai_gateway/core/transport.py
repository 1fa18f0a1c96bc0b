"""
Synchronous JSON-over-HTTP transport shared by the provider adapters.

One call is one POST: the request body is serialized to JSON, sent with the
adapter's auth headers, and the reply is either decoded (JSON or raw bytes)
or converted into a typed gateway error.
"""

import json
import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from .errors import (
    GatewayAuthenticationError,
    GatewayConnectionError,
    GatewayDecodeError,
    GatewayProviderError,
    GatewayRateLimitError,
    GatewayTimeoutError,
    GatewayValidationError,
)

logger = logging.getLogger(__name__)


class Transport:
    """
    Issues authenticated POST requests on behalf of one adapter.

    The transport holds no per-call state, so a single instance can be
    used from several threads at once as long as the underlying
    ``httpx.Client`` is shared.
    """

    def __init__(
        self,
        gateway: str,
        http_client: httpx.Client,
        headers: Mapping[str, str],
        timeout: float,
        owns_client: bool = True,
    ):
        """
        Args:
            gateway: Name of the adapter, attached to every raised error
            http_client: HTTP client used for the round trip
            headers: Auth and protocol headers sent with every request
            timeout: Default deadline in seconds, also applied to injected clients
            owns_client: Whether ``close()`` should close ``http_client``
        """
        self._gateway = gateway
        self._client = http_client
        self._headers = {"Content-Type": "application/json", **headers}
        self._timeout = timeout
        self._owns_client = owns_client

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def post_json(
        self,
        url: str,
        body: Dict[str, Any],
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        POST ``body`` and decode a JSON object from the reply.

        Raises:
            GatewayDecodeError: If a success reply is not a JSON object
        """
        response = self._post(url, body, timeout)

        try:
            data = response.json()
        except ValueError as e:
            raise GatewayDecodeError(
                f"Failed to decode response: {e}",
                gateway=self._gateway,
            ) from e

        if not isinstance(data, dict):
            raise GatewayDecodeError(
                f"Expected a JSON object, got {type(data).__name__}",
                gateway=self._gateway,
            )
        return data

    def post_for_bytes(
        self,
        url: str,
        body: Dict[str, Any],
        timeout: Optional[float] = None,
    ) -> bytes:
        """POST ``body`` and return the raw reply body."""
        response = self._post(url, body, timeout)
        return response.content

    def _post(
        self,
        url: str,
        body: Dict[str, Any],
        timeout: Optional[float],
    ) -> httpx.Response:
        try:
            payload = json.dumps(body)
        except (TypeError, ValueError) as e:
            raise GatewayValidationError(
                f"Request body is not JSON serializable: {e}",
                gateway=self._gateway,
            ) from e

        logger.debug(f"POST {url} via {self._gateway}")
        try:
            response = self._client.post(
                url,
                content=payload,
                headers=self._headers,
                timeout=timeout if timeout is not None else self._timeout,
            )
        except httpx.TimeoutException as e:
            raise GatewayTimeoutError(
                f"Request timed out: {e}",
                gateway=self._gateway,
            ) from e
        except httpx.RequestError as e:
            raise GatewayConnectionError(
                f"Request failed: {e}",
                gateway=self._gateway,
            ) from e

        self._check_response_errors(response)
        return response

    def _check_response_errors(self, response: httpx.Response) -> None:
        """Check response for errors and raise appropriate exceptions."""
        if response.status_code == 200:
            return

        status = response.status_code
        error_type, provider_message = _parse_error_envelope(response)

        if error_type is None and provider_message is None:
            message = f"Request failed with status {status} {response.reason_phrase}".rstrip()
        else:
            message = f"{self._gateway} API error {status}: {provider_message} (type: {error_type})"

        logger.warning(message)

        details = {
            "gateway": self._gateway,
            "status_code": status,
            "error_type": error_type,
            "provider_message": provider_message,
        }

        if status == 401:
            raise GatewayAuthenticationError(message, **details)

        if status == 429:
            raise GatewayRateLimitError(
                message,
                retry_after=_parse_retry_after(response.headers.get("retry-after")),
                **details,
            )

        raise GatewayProviderError(message, **details)


def _parse_error_envelope(response: httpx.Response):
    """
    Extract ``(error.type, error.message)`` from a provider error body.

    Both providers nest the details under ``error``. Returns ``(None, None)``
    when the body is not a recognizable envelope.
    """
    try:
        data = response.json()
    except ValueError:
        return None, None

    if not isinstance(data, dict) or not isinstance(data.get("error"), dict):
        return None, None

    error = data["error"]
    error_type = error.get("type")
    message = error.get("message")
    return (
        str(error_type) if error_type is not None else None,
        str(message) if message is not None else None,
    )


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None
