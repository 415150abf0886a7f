"""Decoding of Phemex scaled-integer and nanosecond fields.

Phemex encodes decimals as integers times a fixed power of ten (``...Ep``
prices, ``...Ev`` values) and timestamps in epoch nanoseconds. Each field's
divisor lives in ``FIELD_SCALES``; adding a field is one table entry.

Nothing here raises on bad input: a missing or malformed value decodes to 0.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

PRICE_SCALE = 10**4
VALUE_SCALE = 10**8
NS_PER_MS = 10**6

FIELD_SCALES: dict[str, int] = {
    "priceEp": PRICE_SCALE,
    "lastEp": PRICE_SCALE,
    "feeAmount": VALUE_SCALE,
    "execFeeEv": VALUE_SCALE,
    "realisedPnl": VALUE_SCALE,
    "realisedPnlEv": VALUE_SCALE,
    "transactTimeNs": NS_PER_MS,
}


@dataclass(frozen=True)
class Trade:
    """One fill in canonical units."""

    timestamp_ms: float
    price: float
    side: str  # "buy" or "sell"
    fee: float
    profit: float


def to_float(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(result):
        return 0.0
    return result


def to_number(value: Any) -> int | float:
    # Integers stay exact so int / int division rounds once (ns timestamps
    # exceed float precision).
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().removeprefix("-").isdecimal():
        return int(value)
    return to_float(value)


def scaled(record: Any, field: str) -> float:
    """Value of ``record[field]`` divided by its fixed scale factor."""
    if not isinstance(record, dict):
        return 0.0
    return to_number(record.get(field)) / FIELD_SCALES.get(field, 1)


def normalize_side(value: Any) -> str:
    return "buy" if str(value or "").lower() == "buy" else "sell"


def normalize_trade(row: Any) -> Trade:
    side = row.get("side") if isinstance(row, dict) else None
    return Trade(
        timestamp_ms=scaled(row, "transactTimeNs"),
        price=scaled(row, "priceEp"),
        side=normalize_side(side),
        fee=scaled(row, "feeAmount"),
        profit=scaled(row, "execFeeEv"),
    )


def normalize_trades(payload: Any) -> list[Trade]:
    """Trades from a trade-history payload, oldest first."""
    rows = payload.get("rows") if isinstance(payload, dict) else None
    if not isinstance(rows, list):
        return []
    trades = [normalize_trade(row) for row in rows]
    trades.sort(key=lambda t: t.timestamp_ms)
    return trades


def normalize_last_price(payload: Any) -> float:
    """Last traded price from a 24h ticker payload.

    Prefers the scaled ``lastEp``; a plain decimal ``lastPrice`` is used as-is.
    """
    if not isinstance(payload, dict):
        return 0.0
    if payload.get("lastEp") is not None:
        return scaled(payload, "lastEp")
    return to_float(payload.get("lastPrice"))


def normalize_realized_pnl(payload: Any) -> float:
    if not isinstance(payload, dict):
        return 0.0
    if payload.get("realisedPnl") is not None:
        return scaled(payload, "realisedPnl")
    return scaled(payload, "realisedPnlEv")
