"""OpenAI chat completions connector."""

from pr_review_bot.connectors.base import BaseAIConnector
from pr_review_bot.errors import AIConnectorError


class OpenAIConnector(BaseAIConnector):
    """Connector for OpenAI's chat completions API."""

    PROVIDER = "openai"
    DEFAULT_MODEL = "gpt-4o"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"

    max_tokens: int = 4000
    temperature: float = 0.2

    async def _request(self, prompt: str) -> str:
        data = await self._post_json(
            f"{self.base_url}/chat/completions",
            {
                "model": self.model,
                "messages": [{"role": "user", "content": prompt}],
                "max_tokens": self.max_tokens,
                "temperature": self.temperature,
            },
            headers={"Authorization": f"Bearer {self.api_key}"},
        )
        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise AIConnectorError(f"Unexpected OpenAI response shape: {e}") from e
