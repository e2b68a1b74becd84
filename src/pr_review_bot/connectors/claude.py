"""Anthropic Claude messages connector."""

from pr_review_bot.connectors.base import BaseAIConnector
from pr_review_bot.errors import AIConnectorError

ANTHROPIC_VERSION = "2023-06-01"


class ClaudeConnector(BaseAIConnector):
    """Connector for Anthropic's messages API."""

    PROVIDER = "claude"
    DEFAULT_MODEL = "claude-3-opus-20240229"
    DEFAULT_BASE_URL = "https://api.anthropic.com/v1"

    max_tokens: int = 4000

    async def _request(self, prompt: str) -> str:
        data = await self._post_json(
            f"{self.base_url}/messages",
            {
                "model": self.model,
                "max_tokens": self.max_tokens,
                "messages": [{"role": "user", "content": prompt}],
            },
            headers={
                "x-api-key": self.api_key,
                "anthropic-version": ANTHROPIC_VERSION,
            },
        )
        try:
            return "".join(
                block.get("text", "") for block in data["content"] if block.get("type") == "text"
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise AIConnectorError(f"Unexpected Claude response shape: {e}") from e
