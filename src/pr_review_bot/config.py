"""Configuration loading and validation for PR Review Bot."""

import os
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from pr_review_bot.agents import ANALYZERS
from pr_review_bot.connectors import PROVIDERS
from pr_review_bot.errors import ConfigError
from pr_review_bot.github.formatter import GROUP_BY_CHOICES

OUTPUT_FORMATS = ("github", "markdown", "json")

# Environment variable used when ai.api_key is empty
API_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "claude": "ANTHROPIC_API_KEY",
}

_ENV_VAR_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


@dataclass
class AIConfig:
    """AI provider configuration."""

    provider: str = "openai"
    api_key: str = ""
    model: str | None = None
    base_url: str | None = None
    timeout_seconds: int = 120
    enabled: bool = True


@dataclass
class GitHubConfig:
    """GitHub integration configuration."""

    token: str = ""
    base_url: str | None = None  # For GitHub Enterprise


@dataclass
class RetrySettings:
    """Retry settings shared by every upstream call."""

    max_attempts: int = 3
    base_delay_ms: int = 1000
    jitter_ms: int = 0


@dataclass
class OrchestratorSettings:
    """Orchestrator configuration."""

    timeout_seconds: int = 120
    max_parallel_files: int = 5


@dataclass
class OutputSettings:
    """Output configuration."""

    format: str = "github"
    file_path: str | None = None
    group_by: str = "file"
    max_inline_comments: int | None = 50


@dataclass
class ReviewPolicy:
    """Review policy configuration."""

    ignore_patterns: list[str] = field(default_factory=list)


@dataclass
class Config:
    """Complete application configuration."""

    ai: AIConfig = field(default_factory=AIConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    retry: RetrySettings = field(default_factory=RetrySettings)
    agents: list[str] = field(default_factory=lambda: list(ANALYZERS))
    orchestrator: OrchestratorSettings = field(default_factory=OrchestratorSettings)
    output: OutputSettings = field(default_factory=OutputSettings)
    review_policy: ReviewPolicy = field(default_factory=ReviewPolicy)

    def to_dict(self) -> dict[str, Any]:
        """Plain dict view with secrets masked."""
        data = asdict(self)
        for section in ("ai", "github"):
            for key in ("api_key", "token"):
                if data[section].get(key):
                    data[section][key] = "***"
        return data


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from file and environment.

    Args:
        config_path: Path to config file (default: config.yaml)

    Returns:
        Loaded configuration

    Raises:
        ConfigError: If the file is not valid YAML
    """
    # Find config file
    if config_path is None:
        config_path = Path("config.yaml")
        if not config_path.exists():
            config_path = Path("config.example.yaml")

    raw_config: dict[str, Any] = {}
    if config_path.exists():
        try:
            with open(config_path) as f:
                raw_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Configuration in {config_path} must be a mapping")

    raw_config = _expand_env_vars(raw_config)
    return _parse_config(raw_config)


def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand ``${VAR}`` references in config values."""
    if isinstance(obj, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


def _parse_config(raw: dict[str, Any]) -> Config:
    """Parse raw config dict into Config object."""
    # AI provider
    ai_raw = raw.get("ai") or {}
    provider = str(ai_raw.get("provider", "openai")).lower()
    env_key = API_KEY_ENV.get(provider)
    ai = AIConfig(
        provider=provider,
        api_key=ai_raw.get("api_key") or (os.environ.get(env_key, "") if env_key else ""),
        model=ai_raw.get("model") or None,
        base_url=ai_raw.get("base_url") or None,
        timeout_seconds=ai_raw.get("timeout_seconds", 120),
        enabled=ai_raw.get("enabled", True),
    )

    # GitHub config
    github_raw = raw.get("github") or {}
    github = GitHubConfig(
        token=github_raw.get("token") or os.environ.get("GITHUB_TOKEN", ""),
        base_url=github_raw.get("base_url") or None,
    )

    retry_raw = raw.get("retry") or {}
    retry = RetrySettings(
        max_attempts=retry_raw.get("max_attempts", 3),
        base_delay_ms=retry_raw.get("base_delay_ms", 1000),
        jitter_ms=retry_raw.get("jitter_ms", 0),
    )

    # Analyzers; default to all of them
    agents = raw.get("agents")
    if not agents:
        agents = list(ANALYZERS)

    orch_raw = raw.get("orchestrator") or {}
    orchestrator = OrchestratorSettings(
        timeout_seconds=orch_raw.get("timeout_seconds", 120),
        max_parallel_files=orch_raw.get("max_parallel_files", 5),
    )

    out_raw = raw.get("output") or {}
    output = OutputSettings(
        format=out_raw.get("format", "github"),
        file_path=out_raw.get("file_path") or None,
        group_by=out_raw.get("group_by", "file"),
        max_inline_comments=out_raw.get("max_inline_comments", 50),
    )

    policy_raw = raw.get("review_policy") or {}
    review_policy = ReviewPolicy(
        ignore_patterns=policy_raw.get("ignore_patterns", []),
    )

    return Config(
        ai=ai,
        github=github,
        retry=retry,
        agents=[str(a) for a in agents],
        orchestrator=orchestrator,
        output=output,
        review_policy=review_policy,
    )


def validate_config(config: Config, require_github: bool = True) -> list[str]:
    """Validate configuration and return list of errors.

    Args:
        config: Configuration to validate
        require_github: Whether a GitHub token is required

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    if config.ai.enabled:
        if config.ai.provider not in PROVIDERS:
            errors.append(
                f"Unsupported AI provider: {config.ai.provider} "
                f"(choose from {', '.join(PROVIDERS)})"
            )
        elif config.ai.provider in API_KEY_ENV and not config.ai.api_key:
            errors.append(
                f"Missing {config.ai.provider} API key "
                f"(set {API_KEY_ENV[config.ai.provider]} or ai.api_key)"
            )

    if require_github and not config.github.token:
        errors.append("Missing GitHub token (set GITHUB_TOKEN or github.token)")

    if not config.agents:
        errors.append("No analyzers configured")
    for name in config.agents:
        if name not in ANALYZERS:
            errors.append(f"Unknown analyzer: {name} (choose from {', '.join(ANALYZERS)})")

    if config.retry.max_attempts < 1:
        errors.append("retry.max_attempts must be at least 1")
    if config.retry.base_delay_ms < 0:
        errors.append("retry.base_delay_ms must not be negative")
    if config.retry.jitter_ms < 0:
        errors.append("retry.jitter_ms must not be negative")

    if config.orchestrator.max_parallel_files < 1:
        errors.append("orchestrator.max_parallel_files must be at least 1")

    if config.output.format not in OUTPUT_FORMATS:
        errors.append(f"output.format must be one of {', '.join(OUTPUT_FORMATS)}")
    if config.output.group_by not in GROUP_BY_CHOICES:
        errors.append(f"output.group_by must be one of {', '.join(GROUP_BY_CHOICES)}")
    if config.output.max_inline_comments is not None and config.output.max_inline_comments < 0:
        errors.append("output.max_inline_comments must not be negative")

    return errors
