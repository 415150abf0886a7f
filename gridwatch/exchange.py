"""Phemex spot endpoints used for bot reconstruction."""

from __future__ import annotations

import logging

from .models import Credentials
from .transport import ExchangeResult, SignedTransport

logger = logging.getLogger(__name__)

PATH_SPOT_WALLETS = "/spot/wallets"
PATH_TICKER_24H = "/spot/ticker/24hr"
PATH_ACTIVE_ORDERS = "/spot/orders/active"
PATH_TRADE_HISTORY = "/exchange/spot/order/trades"
PATH_SPOT_PNL = "/api-data/spot/pnl"


class PhemexClient:
    """Read-only account and market queries, one method per endpoint."""

    def __init__(self, transport: SignedTransport) -> None:
        self._transport = transport

    async def close(self) -> None:
        await self._transport.close()

    async def __aenter__(self) -> "PhemexClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # --- Account ---

    async def get_spot_wallets(self, credentials: Credentials) -> ExchangeResult:
        return await self._transport.request(credentials, PATH_SPOT_WALLETS)

    async def validate_credentials(self, credentials: Credentials) -> bool:
        """True if the key pair can list spot wallets."""
        result = await self.get_spot_wallets(credentials)
        if not result.ok:
            logger.warning(
                "Credential check failed for %s: %s",
                credentials.masked_key,
                result.error,
            )
        return result.ok

    # --- Market / trading history ---

    async def get_ticker(self, credentials: Credentials, symbol: str) -> ExchangeResult:
        return await self._transport.request(
            credentials, PATH_TICKER_24H, query={"symbol": symbol}
        )

    async def get_open_orders(self, credentials: Credentials, symbol: str) -> ExchangeResult:
        return await self._transport.request(
            credentials, PATH_ACTIVE_ORDERS, query={"symbol": symbol}
        )

    async def get_trade_history(self, credentials: Credentials, symbol: str) -> ExchangeResult:
        return await self._transport.request(
            credentials, PATH_TRADE_HISTORY, query={"symbol": symbol}
        )

    async def get_pnl(self, credentials: Credentials, symbol: str) -> ExchangeResult:
        return await self._transport.request(
            credentials, PATH_SPOT_PNL, query={"symbol": symbol}
        )
