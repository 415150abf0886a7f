"""Per-bot live state reconstruction.

The exchange has no notion of "this grid bot": fills are scoped to a bot
purely by time window (``started_at`` onwards) on the bot's trading pair.
Each of the three requests (ticker, trades, PnL) may fail independently; a
failure zeroes only the fields derived from it.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable

from .bot_state import ArbitrageEvent, BotState, PricePoint
from .exchange import PhemexClient
from .grid import generate_levels
from .metrics import (
    compute_apr,
    compute_roi,
    count_arbitrages,
    format_runtime,
    utc_now,
)
from .models import BotConfig, Credentials
from .normalizer import (
    Trade,
    normalize_last_price,
    normalize_realized_pnl,
    normalize_trades,
)
from .transport import ExchangeResult

logger = logging.getLogger(__name__)

MAX_ARBITRAGE_EVENTS = 20
MAX_PRICE_POINTS = 48


class BotReconstructor:
    """Builds a BotState for one bot from three concurrent exchange queries."""

    def __init__(
        self,
        client: PhemexClient,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._client = client
        self._clock = clock

    async def reconstruct(self, credentials: Credentials, bot: BotConfig) -> BotState:
        now_ms = int(self._clock().timestamp() * 1000)
        runtime_ms = max(now_ms - bot.started_at_ms, 0)
        grid_levels = generate_levels(
            bot.lower_limit, bot.upper_limit, bot.grid_count, bot.grid_type
        )

        ticker, trades_result, pnl = await asyncio.gather(
            self._client.get_ticker(credentials, bot.pair),
            self._client.get_trade_history(credentials, bot.pair),
            self._client.get_pnl(credentials, bot.pair),
        )
        self._log_failures(bot, ticker=ticker, trades=trades_result, pnl=pnl)

        current_price = normalize_last_price(ticker.data) if ticker.ok else 0.0
        realized_pnl = normalize_realized_pnl(pnl.data) if pnl.ok else 0.0
        trades = (
            scope_trades(normalize_trades(trades_result.data), bot.started_at_ms)
            if trades_result.ok
            else []
        )

        # Not derivable from the spot endpoints; reported as zero.
        unrealized_pnl = 0.0

        roi = compute_roi(realized_pnl, unrealized_pnl, bot.investment)
        return BotState(
            config=bot,
            current_price=current_price,
            realized_pnl=realized_pnl,
            unrealized_pnl=unrealized_pnl,
            total_arbitrages=count_arbitrages(len(trades)),
            total_fees=sum(t.fee for t in trades),
            roi=roi,
            apr=compute_apr(roi, runtime_ms),
            runtime=format_runtime(runtime_ms),
            runtime_ms=runtime_ms,
            grid_levels=tuple(grid_levels),
            price_history=build_price_history(trades, current_price, now_ms),
            arbitrages=build_arbitrages(trades),
        )

    @staticmethod
    def _log_failures(bot: BotConfig, **results: ExchangeResult) -> None:
        for name, result in results.items():
            if not result.ok:
                logger.warning(
                    "Bot %s (%s): %s request failed: %s",
                    bot.id,
                    bot.pair,
                    name,
                    result.error,
                )


def scope_trades(trades: list[Trade], started_at_ms: float) -> list[Trade]:
    """Drop fills that predate the bot's start."""
    return [t for t in trades if t.timestamp_ms >= started_at_ms]


def build_arbitrages(trades: list[Trade]) -> tuple[ArbitrageEvent, ...]:
    return tuple(
        ArbitrageEvent(
            timestamp=t.timestamp_ms, price=t.price, side=t.side, profit=t.profit
        )
        for t in trades[-MAX_ARBITRAGE_EVENTS:]
    )


def build_price_history(
    trades: list[Trade], current_price: float, now_ms: float
) -> tuple[PricePoint, ...]:
    """Recent fill prices, ending with the live price when one is known."""
    points = [
        PricePoint(timestamp=t.timestamp_ms, price=t.price)
        for t in trades[-MAX_PRICE_POINTS:]
    ]
    if current_price > 0:
        points.append(PricePoint(timestamp=now_ms, price=current_price))
    return tuple(points)
