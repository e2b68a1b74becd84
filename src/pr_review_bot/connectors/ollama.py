"""Ollama connector for self-hosted models."""

from pr_review_bot.connectors.base import BaseAIConnector
from pr_review_bot.errors import AIConnectorError


class OllamaConnector(BaseAIConnector):
    """Connector for a local or self-hosted Ollama server.

    The API key is unused; Ollama does not authenticate requests.
    """

    PROVIDER = "ollama"
    DEFAULT_MODEL = "llama3.2"
    DEFAULT_BASE_URL = "http://localhost:11434"

    async def _request(self, prompt: str) -> str:
        data = await self._post_json(
            f"{self.base_url}/api/generate",
            {"model": self.model, "prompt": prompt, "stream": False},
        )
        if "response" not in data:
            raise AIConnectorError("Ollama response missing 'response' field")
        return data["response"]
