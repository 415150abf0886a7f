"""Signed HTTP transport for the Phemex REST API.

Every authenticated request carries three headers: the API key, an
HMAC-SHA256 signature and the signature expiry. The signed string is
``path + query_string + expiry + body`` where the query string keeps the
caller's parameter order (the exchange verifies the exact concatenation).

Outcomes are classified into an ``ExchangeResult`` instead of raising, so a
caller can degrade one field without try/except at every call site.
"""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

import httpx

from .errors import (
    ApiError,
    AuthError,
    ExchangeError,
    NetworkError,
    RateLimitError,
    TransportError,
)
from .models import Credentials

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.phemex.com"
EXPIRY_WINDOW_SECONDS = 60

HEADER_ACCESS_TOKEN = "x-phemex-access-token"
HEADER_SIGNATURE = "x-phemex-request-signature"
HEADER_EXPIRY = "x-phemex-request-expiry"

RETRYABLE_ERRORS = (RateLimitError, NetworkError)


@dataclass(frozen=True)
class ExchangeResult:
    """Either the envelope's ``data`` payload or the error that prevented it."""

    data: Any = None
    error: ExchangeError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.data


def build_query_string(params: dict[str, Any] | None) -> str:
    """``key=value`` pairs joined by ``&``, in insertion order."""
    if not params:
        return ""
    return "&".join(f"{k}={v}" for k, v in params.items())


def sign(secret: str, path: str, query_string: str, expiry: int, body: str = "") -> str:
    """Hex HMAC-SHA256 of ``path + query_string + expiry + body``."""
    payload = f"{path}{query_string}{expiry}{body}"
    return hmac.new(
        secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256
    ).hexdigest()


def classify_response(response: httpx.Response) -> ExchangeResult:
    """Map an HTTP response onto an ExchangeResult."""
    if response.status_code == 401:
        return ExchangeResult(error=AuthError())
    if response.status_code == 429:
        return ExchangeResult(error=RateLimitError())
    if not response.is_success:
        return ExchangeResult(error=TransportError(response.status_code))

    try:
        envelope = response.json()
    except ValueError:
        return ExchangeResult(error=NetworkError("Malformed response body"))

    if not isinstance(envelope, dict) or envelope.get("code") != 0:
        msg = envelope.get("msg") if isinstance(envelope, dict) else None
        code = envelope.get("code") if isinstance(envelope, dict) else None
        return ExchangeResult(error=ApiError(msg or "Unknown API error", code))

    return ExchangeResult(data=envelope.get("data"))


class SignedTransport:
    """Issues signed requests over a shared ``httpx.AsyncClient``.

    Holds no per-request state. Retries are off by default; when enabled only
    rate-limit and network failures are retried, each attempt re-signed with
    a fresh expiry.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
        max_retries: int = 0,
        retry_backoff_seconds: float = 1.0,
        max_retry_delay_seconds: float = 8.0,
        time_fn: Callable[[], float] = time.time,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        # A client passed in is owned by the caller and not closed here.
        if client is not None:
            self._client = client
            self._owns_client = False
        else:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout)
            self._owns_client = True
        self._timeout = timeout
        self._max_retries = max(max_retries, 0)
        self._backoff = retry_backoff_seconds
        self._max_delay = max_retry_delay_seconds
        self._time_fn = time_fn

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def build_headers(
        self,
        credentials: Credentials,
        path: str,
        query_string: str,
        body: str,
    ) -> dict[str, str]:
        expiry = int(self._time_fn()) + EXPIRY_WINDOW_SECONDS
        signature = sign(credentials.api_secret, path, query_string, expiry, body)
        return {
            "Content-Type": "application/json",
            HEADER_ACCESS_TOKEN: credentials.api_key,
            HEADER_SIGNATURE: signature,
            HEADER_EXPIRY: str(expiry),
        }

    async def request(
        self,
        credentials: Credentials,
        path: str,
        method: str = "GET",
        query: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> ExchangeResult:
        """Send one signed request, retrying transient failures if enabled."""
        delay = self._backoff
        attempt = 0
        while True:
            result = await self._send_once(credentials, path, method, query, body)
            if result.ok or not isinstance(result.error, RETRYABLE_ERRORS):
                return result
            if attempt >= self._max_retries:
                return result

            attempt += 1
            logger.warning(
                "%s %s failed (%s); retry %d/%d in %.1fs",
                method,
                path,
                result.error,
                attempt,
                self._max_retries,
                delay,
            )
            await asyncio.sleep(delay)
            delay = min(delay * 2, self._max_delay)

    async def _send_once(
        self,
        credentials: Credentials,
        path: str,
        method: str,
        query: dict[str, Any] | None,
        body: dict[str, Any] | None,
    ) -> ExchangeResult:
        query_string = build_query_string(query)
        body_json = (
            json.dumps(body, separators=(",", ":")) if body is not None else ""
        )
        headers = self.build_headers(credentials, path, query_string, body_json)
        url = f"{self.base_url}{path}"
        if query_string:
            url = f"{url}?{query_string}"

        try:
            response = await self._client.request(
                method,
                url,
                headers=headers,
                content=body_json or None,
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            logger.debug("Network error on %s %s: %s", method, path, e)
            return ExchangeResult(error=NetworkError())

        result = classify_response(response)
        if not result.ok:
            logger.debug("%s %s -> %s", method, path, result.error)
        return result
