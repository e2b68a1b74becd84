"""Exception types shared across the reviewer."""


class ReviewError(Exception):
    """Base class for reviewer errors."""

    pass


class RateLimitError(ReviewError):
    """Raised when an upstream service signals a rate limit (HTTP 429)."""

    def __init__(self, message: str, status: int = 429) -> None:
        super().__init__(message)
        self.status = status


class AIConnectorError(ReviewError):
    """Raised when an AI provider call fails for a reason other than rate limiting."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ConfigError(ReviewError):
    """Raised when configuration cannot be loaded."""

    pass
