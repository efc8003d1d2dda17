"""HTTP client for the credential-injecting completion proxy."""

import json
import logging
from dataclasses import dataclass

import httpx

from foodtrack.domain.errors import TransportError
from foodtrack.services.analysis import CompletionClient

_logger = logging.getLogger(__name__)


@dataclass
class HttpxProxyCompletionClient(CompletionClient):
    """HTTPX-backed client posting completion requests to the proxy."""

    url: str
    http_client: httpx.AsyncClient
    timeout: float = 60

    @classmethod
    def create(cls, url: str, timeout: float = 60) -> "HttpxProxyCompletionClient":
        """Create a proxy client with a managed httpx session."""
        return cls(url=url, http_client=httpx.AsyncClient(), timeout=timeout)

    async def complete(self, payload: dict[str, object]) -> str:
        """Post a completion request and return the raw response body."""
        try:
            response = await self.http_client.post(
                self.url,
                json=payload,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"Completion request failed: {exc}") from exc

        body = response.text
        _logger.debug("Completion proxy status=%s", response.status_code)
        if response.is_success:
            return body
        raise TransportError(
            error_message(body, response.status_code),
            status_code=response.status_code,
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def error_message(body: str, status_code: int) -> str:
    """Pick the most helpful message out of an error response body."""
    try:
        document = json.loads(body)
    except ValueError:
        return body.strip() or f"Completion request failed ({status_code})"
    if isinstance(document, dict):
        error = document.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(document.get("message"), str):
            return document["message"]
        if isinstance(error, str):
            return error
    return f"Completion request failed ({status_code})"
