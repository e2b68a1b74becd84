"""Base class for AI provider connectors."""

import logging
from typing import Any, Protocol

import httpx

from pr_review_bot.errors import AIConnectorError, RateLimitError
from pr_review_bot.retry import RetryableCall, RetryPolicy

logger = logging.getLogger(__name__)


class AIConnector(Protocol):
    """Text-in/text-out access to a language model."""

    async def generate_response(self, prompt: str) -> str:
        """Generate a completion for ``prompt``."""
        ...


class BaseAIConnector:
    """Shared HTTP and retry handling for AI connectors."""

    PROVIDER: str = "base"
    DEFAULT_MODEL: str = ""
    DEFAULT_BASE_URL: str = ""

    def __init__(
        self,
        api_key: str = "",
        model: str | None = None,
        base_url: str | None = None,
        timeout: float = 120,
        retry_policy: RetryPolicy | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the connector.

        Args:
            api_key: Provider API key
            model: Model name (defaults to the provider default)
            base_url: Override for the provider endpoint
            timeout: Request timeout in seconds
            retry_policy: Retry policy for each request
            http_client: Optional pre-built client (used by tests)
        """
        self.api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.retry = RetryableCall(retry_policy)
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "BaseAIConnector":
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def generate_response(self, prompt: str) -> str:
        """Send ``prompt`` to the provider with retries.

        Args:
            prompt: Prompt text

        Returns:
            The model's text response

        Raises:
            RateLimitError: If the provider kept rate limiting
            AIConnectorError: If the provider kept failing
        """
        return await self.retry.run(
            lambda: self._request(prompt),
            description=f"{self.PROVIDER} request",
        )

    async def _request(self, prompt: str) -> str:
        """Perform a single provider request."""
        raise NotImplementedError

    async def _post_json(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """POST a JSON payload and translate HTTP failures.

        Args:
            url: Endpoint URL
            payload: JSON body
            headers: Extra request headers

        Returns:
            Decoded JSON response
        """
        response = await self._client.post(
            url,
            json=payload,
            headers={"Content-Type": "application/json", **(headers or {})},
        )

        if response.status_code == 429:
            raise RateLimitError(
                f"{self.PROVIDER} API rate limit exceeded: {self._error_message(response)}"
            )
        if response.is_error:
            raise AIConnectorError(
                f"{self.PROVIDER} API error ({response.status_code}): "
                f"{self._error_message(response)}",
                status=response.status_code,
            )

        return response.json()

    def _error_message(self, response: httpx.Response) -> str:
        """Extract a provider error message from a failed response."""
        try:
            data = response.json()
        except ValueError:
            return response.text[:200] or "Unknown error"
        error = data.get("error") if isinstance(data, dict) else None
        if isinstance(error, dict):
            return error.get("message", "Unknown error")
        if isinstance(error, str):
            return error
        return "Unknown error"
