"""Shared test fixtures for gridwatch tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from gridwatch.bot_state import BotState
from gridwatch.grid import GridType
from gridwatch.models import BotConfig, Credentials
from gridwatch.transport import ExchangeResult

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
STARTED_AT = NOW - timedelta(days=10)


def ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def trade_row(
    at: datetime,
    price: float,
    side: str = "Buy",
    fee: float = 0.5,
    profit: float = 1.25,
) -> dict:
    """A trade-history row in Phemex's scaled encoding."""
    return {
        "transactTimeNs": ms(at) * 10**6,
        "priceEp": int(round(price * 10**4)),
        "side": side,
        "feeAmount": int(round(fee * 10**8)),
        "execFeeEv": int(round(profit * 10**8)),
    }


def fake_client(
    ticker: ExchangeResult | None = None,
    trades: ExchangeResult | None = None,
    pnl: ExchangeResult | None = None,
    valid: bool = True,
) -> MagicMock:
    """PhemexClient stand-in returning canned ExchangeResults."""
    client = MagicMock()
    client.validate_credentials = AsyncMock(return_value=valid)
    client.get_ticker = AsyncMock(
        return_value=ticker or ExchangeResult(data={"lastEp": 672455000})
    )
    client.get_trade_history = AsyncMock(
        return_value=trades or ExchangeResult(data={"rows": []})
    )
    client.get_pnl = AsyncMock(
        return_value=pnl or ExchangeResult(data={"realisedPnl": 23456000000})
    )
    return client


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(api_key="ak-1234567890", api_secret="s3cret")


@pytest.fixture
def btc_bot() -> BotConfig:
    return BotConfig(
        id="btc-1",
        pair="BTCUSDT",
        display_pair="BTC/USDT",
        upper_limit=72000,
        lower_limit=62000,
        grid_count=20,
        grid_type=GridType.ARITHMETIC,
        investment=5000,
        started_at=STARTED_AT,
    )


@pytest.fixture
def eth_bot() -> BotConfig:
    return BotConfig(
        id="eth-1",
        pair="ETHUSDT",
        display_pair="ETH/USDT",
        upper_limit=3800,
        lower_limit=3100,
        grid_count=15,
        grid_type=GridType.GEOMETRIC,
        investment=3000,
        started_at=STARTED_AT + timedelta(days=2),
    )


@pytest.fixture
def btc_state(btc_bot: BotConfig) -> BotState:
    return BotState(
        config=btc_bot,
        current_price=67245.5,
        realized_pnl=234.56,
        unrealized_pnl=-45.23,
        total_arbitrages=47,
        total_fees=12.34,
        roi=3.7866,
        apr=138.2,
        runtime="10d 0h 0m",
        runtime_ms=864_000_000,
        grid_levels=(62000.0, 64500.0, 67000.0, 69500.0, 72000.0),
    )
