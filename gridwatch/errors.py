"""Exception taxonomy.

Transport failures are not raised by ``SignedTransport``; they are returned
inside an ``ExchangeResult`` so callers decide what is fatal.
"""

from __future__ import annotations


class GridwatchError(Exception):
    """Base class for all gridwatch errors."""


class ExchangeError(GridwatchError):
    """Base class for outcomes of a request to the exchange."""


class AuthError(ExchangeError):
    """HTTP 401: bad or revoked credentials."""

    def __init__(self, message: str = "Authentication failed - check your API keys") -> None:
        super().__init__(message)


class RateLimitError(ExchangeError):
    """HTTP 429: throttled by the exchange."""

    def __init__(self, message: str = "API rate limit reached - please wait") -> None:
        super().__init__(message)


class TransportError(ExchangeError):
    """Any other non-2xx HTTP status."""

    def __init__(self, status: int) -> None:
        super().__init__(f"API error: {status}")
        self.status = status


class ApiError(ExchangeError):
    """2xx response whose envelope reports a business error (``code != 0``)."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class NetworkError(ExchangeError):
    """No usable response was received."""

    def __init__(self, message: str = "Network error - please check your connection") -> None:
        super().__init__(message)


class ValidationError(GridwatchError, ValueError):
    """Malformed bot configuration."""


class BotNotFoundError(GridwatchError, LookupError):
    """Unknown bot id, or the bot belongs to another owner."""
