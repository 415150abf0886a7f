"""Reconstructed per-bot state and the fleet result.

A BotState is built fresh on every fleet fetch and never mutated; live
reconstruction, the demo synthesizer and the placeholder path all produce the
same shape so consumers only branch on ``FleetResult.mode``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .models import BotConfig


class FleetMode(str, Enum):
    LIVE = "live"
    DEMO = "demo"


@dataclass(frozen=True)
class PricePoint:
    timestamp: float  # epoch ms
    price: float


@dataclass(frozen=True)
class ArbitrageEvent:
    timestamp: float  # epoch ms
    price: float
    side: str  # "buy" or "sell"
    profit: float


@dataclass(frozen=True)
class BotState:
    """Live (or synthetic) economic state of one grid bot."""

    config: BotConfig

    current_price: float = 0.0
    realized_pnl: float = 0.0
    unrealized_pnl: float = 0.0
    total_arbitrages: int = 0
    total_fees: float = 0.0
    roi: float = 0.0
    apr: float = 0.0
    runtime: str = "0d 0h 0m"
    runtime_ms: int = 0

    grid_levels: tuple[float, ...] = ()
    price_history: tuple[PricePoint, ...] = ()
    arbitrages: tuple[ArbitrageEvent, ...] = ()

    @property
    def id(self) -> str:
        return self.config.id

    @property
    def total_pnl(self) -> float:
        return self.realized_pnl + self.unrealized_pnl

    def to_dict(self) -> dict[str, Any]:
        """Render the camelCase JSON shape consumed by dashboards."""
        c = self.config
        return {
            "id": c.id,
            "pair": c.pair,
            "displayPair": c.display_pair,
            "status": c.status.value,
            "upperLimit": c.upper_limit,
            "lowerLimit": c.lower_limit,
            "gridCount": c.grid_count,
            "gridType": c.grid_type.value,
            "investment": c.investment,
            "startedAt": c.started_at.isoformat(),
            "notes": c.notes,
            "currentPrice": self.current_price,
            "realizedPnl": self.realized_pnl,
            "unrealizedPnl": self.unrealized_pnl,
            "totalArbitrages": self.total_arbitrages,
            "totalFees": self.total_fees,
            "roi": self.roi,
            "apr": self.apr,
            "runtime": self.runtime,
            "runtimeMs": self.runtime_ms,
            "gridLevels": list(self.grid_levels),
            "priceHistory": [
                {"timestamp": p.timestamp, "price": p.price}
                for p in self.price_history
            ],
            "arbitrages": [
                {
                    "timestamp": a.timestamp,
                    "price": a.price,
                    "type": a.side,
                    "profit": a.profit,
                }
                for a in self.arbitrages
            ],
        }


def placeholder_state(config: BotConfig) -> BotState:
    """Zero-filled state built from the configuration alone."""
    return BotState(config=config)


@dataclass(frozen=True)
class FleetResult:
    mode: FleetMode
    bots: tuple[BotState, ...] = field(default_factory=tuple)
    message: str | None = None

    @property
    def is_demo(self) -> bool:
        return self.mode is FleetMode.DEMO

    def get(self, bot_id: str) -> BotState | None:
        for state in self.bots:
            if state.id == bot_id:
                return state
        return None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "success": True,
            "demo": self.is_demo,
            "bots": [b.to_dict() for b in self.bots],
        }
        if self.message:
            out["message"] = self.message
        return out


@dataclass(frozen=True)
class StateSnapshot:
    """Counters remembered at the last report, for computing deltas."""

    total_arbitrages: int = 0
    realized_pnl: float = 0.0
    total_fees: float = 0.0

    @classmethod
    def of(cls, state: BotState) -> "StateSnapshot":
        return cls(
            total_arbitrages=state.total_arbitrages,
            realized_pnl=state.realized_pnl,
            total_fees=state.total_fees,
        )
