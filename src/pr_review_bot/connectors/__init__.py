"""AI provider connectors."""

from pr_review_bot.connectors.base import AIConnector, BaseAIConnector
from pr_review_bot.connectors.claude import ClaudeConnector
from pr_review_bot.connectors.ollama import OllamaConnector
from pr_review_bot.connectors.openai import OpenAIConnector
from pr_review_bot.retry import RetryPolicy

PROVIDERS: dict[str, type[BaseAIConnector]] = {
    "claude": ClaudeConnector,
    "openai": OpenAIConnector,
    "ollama": OllamaConnector,
}


def create_connector(
    provider: str,
    api_key: str = "",
    model: str | None = None,
    base_url: str | None = None,
    timeout: float = 120,
    retry_policy: RetryPolicy | None = None,
) -> BaseAIConnector:
    """Create an AI connector for a provider name.

    Args:
        provider: One of "claude", "openai", "ollama"
        api_key: Provider API key (unused by Ollama)
        model: Optional model override
        base_url: Optional endpoint override
        timeout: Request timeout in seconds
        retry_policy: Retry policy shared by all requests

    Returns:
        Connector instance

    Raises:
        ValueError: If the provider is not supported
    """
    connector_cls = PROVIDERS.get(provider.lower())
    if connector_cls is None:
        raise ValueError(f"Unsupported AI provider: {provider}")
    return connector_cls(
        api_key=api_key,
        model=model,
        base_url=base_url,
        timeout=timeout,
        retry_policy=retry_policy,
    )


__all__ = [
    "AIConnector",
    "BaseAIConnector",
    "ClaudeConnector",
    "OllamaConnector",
    "OpenAIConnector",
    "PROVIDERS",
    "create_connector",
]
