"""Synthetic fleet served whenever live data is unavailable.

The example bots carry fixed headline figures; everything derived from them
(ROI, APR, runtime string, ladder) is computed with the same functions the
live path uses, so the demo data satisfies the same invariants. Price history
and arbitrage events are randomised, reproducibly for a fixed seed.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from .bot_state import ArbitrageEvent, BotState, PricePoint
from .grid import GridType, generate_levels
from .metrics import (
    MS_PER_DAY,
    MS_PER_HOUR,
    compute_apr,
    compute_roi,
    format_runtime,
    utc_now,
)
from .models import BotConfig, normalize_pair

HISTORY_POINTS = 48
ARBITRAGE_EVENTS = 12


@dataclass(frozen=True)
class DemoBot:
    id: str
    pair: str
    lower: float
    upper: float
    grid_count: int
    grid_type: GridType
    investment: float
    current_price: float
    realized_pnl: float
    unrealized_pnl: float
    total_arbitrages: int
    total_fees: float
    runtime_ms: int


DEMO_BOTS: tuple[DemoBot, ...] = (
    DemoBot(
        id="bot-1", pair="BTC/USDT", lower=62000, upper=72000, grid_count=20,
        grid_type=GridType.ARITHMETIC, investment=5000, current_price=67245.50,
        realized_pnl=234.56, unrealized_pnl=-45.23, total_arbitrages=47,
        total_fees=12.34, runtime_ms=1_056_720_000,
    ),
    DemoBot(
        id="bot-2", pair="ETH/USDT", lower=3100, upper=3800, grid_count=15,
        grid_type=GridType.GEOMETRIC, investment=3000, current_price=3456.78,
        realized_pnl=156.78, unrealized_pnl=23.45, total_arbitrages=32,
        total_fees=8.92, runtime_ms=742_320_000,
    ),
    DemoBot(
        id="bot-3", pair="SOL/USDT", lower=150, upper=200, grid_count=10,
        grid_type=GridType.ARITHMETIC, investment=1500, current_price=178.45,
        realized_pnl=89.12, unrealized_pnl=-12.34, total_arbitrages=28,
        total_fees=4.56, runtime_ms=553_500_000,
    ),
)


class DemoSynthesizer:
    """Generates the demo fleet. Same seed and clock give identical output."""

    def __init__(
        self,
        seed: int | None = None,
        clock: Callable[[], datetime] = utc_now,
        bots: tuple[DemoBot, ...] = DEMO_BOTS,
    ) -> None:
        self._seed = seed
        self._clock = clock
        self._bots = bots

    def generate(self) -> tuple[BotState, ...]:
        rng = random.Random(self._seed)
        now = self._clock()
        return tuple(self._build(bot, rng, now) for bot in self._bots)

    def _build(self, bot: DemoBot, rng: random.Random, now: datetime) -> BotState:
        symbol, display = normalize_pair(bot.pair)
        config = BotConfig(
            id=bot.id,
            pair=symbol,
            display_pair=display,
            upper_limit=bot.upper,
            lower_limit=bot.lower,
            grid_count=bot.grid_count,
            grid_type=bot.grid_type,
            investment=bot.investment,
            started_at=now - timedelta(milliseconds=bot.runtime_ms),
        )
        levels = generate_levels(bot.lower, bot.upper, bot.grid_count, bot.grid_type)
        now_ms = now.timestamp() * 1000
        roi = compute_roi(bot.realized_pnl, bot.unrealized_pnl, bot.investment)

        return BotState(
            config=config,
            current_price=bot.current_price,
            realized_pnl=bot.realized_pnl,
            unrealized_pnl=bot.unrealized_pnl,
            total_arbitrages=bot.total_arbitrages,
            total_fees=bot.total_fees,
            roi=roi,
            apr=compute_apr(roi, bot.runtime_ms),
            runtime=format_runtime(bot.runtime_ms),
            runtime_ms=bot.runtime_ms,
            grid_levels=tuple(levels),
            price_history=random_price_history(
                rng, bot.current_price, bot.lower, bot.upper, now_ms
            ),
            arbitrages=random_arbitrages(rng, levels, bot.current_price, now_ms),
        )


def random_price_history(
    rng: random.Random,
    current_price: float,
    lower: float,
    upper: float,
    now_ms: float,
) -> tuple[PricePoint, ...]:
    """Hourly random walk clamped to ``[lower, upper]``, ending at now."""
    span = upper - lower
    price = current_price
    points: list[PricePoint] = []
    for hours_ago in range(HISTORY_POINTS, 0, -1):
        price += (rng.random() - 0.5) * span * 0.05
        price = max(lower, min(upper, price))
        points.append(PricePoint(timestamp=now_ms - hours_ago * MS_PER_HOUR, price=price))
    points.append(PricePoint(timestamp=now_ms, price=current_price))
    return tuple(points)


def random_arbitrages(
    rng: random.Random,
    levels: list[float],
    current_price: float,
    now_ms: float,
) -> tuple[ArbitrageEvent, ...]:
    """Fills on grid levels over the last two days, oldest first."""
    events = []
    for _ in range(ARBITRAGE_EVENTS):
        level = levels[rng.randrange(len(levels) - 1)]
        events.append(
            ArbitrageEvent(
                timestamp=now_ms - rng.random() * MS_PER_DAY * 2,
                price=level,
                side="buy" if level < current_price else "sell",
                profit=rng.random() * 10 + 2,
            )
        )
    events.sort(key=lambda e: e.timestamp)
    return tuple(events)
