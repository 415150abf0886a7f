"""Derived return metrics for a grid bot."""

from __future__ import annotations

from datetime import datetime, timezone

MS_PER_MINUTE = 60 * 1000
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR


def compute_roi(realized_pnl: float, unrealized_pnl: float, investment: float) -> float:
    """Return on investment in percent; 0 when there is no investment."""
    if investment <= 0:
        return 0.0
    return (realized_pnl + unrealized_pnl) / investment * 100


def compute_apr(roi: float, runtime_ms: float) -> float:
    """Linear annualisation of ``roi`` over the elapsed days."""
    runtime_days = runtime_ms / MS_PER_DAY
    if runtime_days <= 0:
        return 0.0
    return roi / runtime_days * 365


def format_runtime(runtime_ms: float) -> str:
    """``"{d}d {h}h {m}m"``, each unit truncated."""
    ms = max(int(runtime_ms), 0)
    days = ms // MS_PER_DAY
    hours = (ms % MS_PER_DAY) // MS_PER_HOUR
    minutes = (ms % MS_PER_HOUR) // MS_PER_MINUTE
    return f"{days}d {hours}h {minutes}m"


def count_arbitrages(trade_count: int) -> int:
    # One round trip = one entry fill + one exit fill. Fills are not paired
    # by grid level, so this is an approximation.
    return trade_count // 2


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
