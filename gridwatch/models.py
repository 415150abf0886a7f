"""Input models: credentials and user-declared bot configuration.

Bot configurations come from an external store (or the YAML config file) as
plain dicts; ``parse_bot_config`` turns one into an immutable ``BotConfig``.
Construction validates the grid bounds so an invalid configuration can never
reach ladder generation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .errors import ValidationError
from .grid import GridType, check_grid_bounds


class BotStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    STOPPED = "stopped"


@dataclass(frozen=True)
class Credentials:
    """Decrypted API key pair, valid for one fleet fetch."""

    api_key: str
    api_secret: str = field(repr=False)

    @property
    def masked_key(self) -> str:
        if not self.api_key or len(self.api_key) < 8:
            return "********"
        return f"{self.api_key[:4]}****{self.api_key[-4:]}"


@dataclass(frozen=True)
class BotConfig:
    """A grid bot as declared by its owner."""

    id: str
    pair: str  # exchange symbol, e.g. "BTCUSDT"
    display_pair: str  # e.g. "BTC/USDT"
    upper_limit: float
    lower_limit: float
    grid_count: int
    grid_type: GridType
    investment: float
    started_at: datetime  # timezone-aware
    notes: str | None = None
    status: BotStatus = BotStatus.ACTIVE
    owner_id: str = "default"

    def __post_init__(self) -> None:
        check_grid_bounds(self.lower_limit, self.upper_limit, self.grid_count)
        if not math.isfinite(self.investment) or self.investment <= 0:
            raise ValidationError(
                f"investment must be a positive number, got {self.investment}"
            )
        if self.started_at.tzinfo is None:
            raise ValidationError("started_at must be timezone-aware")

    @property
    def started_at_ms(self) -> int:
        return int(self.started_at.timestamp() * 1000)


REQUIRED_BOT_FIELDS = (
    "pair",
    "upper_limit",
    "lower_limit",
    "grid_count",
    "investment",
    "started_at",
)


def normalize_pair(pair: str) -> tuple[str, str]:
    """Return ``(exchange_symbol, display_pair)`` for a user-entered pair.

    ``"btc/usdt"`` -> ``("BTCUSDT", "BTC/USDT")``. Without a separator the
    last four characters are taken as the quote asset.
    """
    pair = pair.strip().upper()
    symbol = pair.replace("/", "")
    if "/" in pair:
        display = pair
    else:
        display = f"{pair[:-4]}/{pair[-4:]}"
    return symbol, display


def parse_started_at(value: Any) -> datetime:
    """Accept an aware/naive datetime, an ISO-8601 string or epoch millis.

    Naive values are taken as UTC.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        dt = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise ValidationError(f"invalid started_at: {value!r}") from e
    else:
        raise ValidationError(f"invalid started_at: {value!r}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_grid_count(value: Any) -> int:
    """Integer grid count; ``2.7`` or ``"2.7"`` is rejected, not truncated."""
    if isinstance(value, bool):
        raise ValidationError(f"invalid grid_count: {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"grid_count must be a whole number, got {value}")
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"invalid grid_count: {value!r}") from e


def parse_bot_config(data: dict, owner_id: str = "default") -> BotConfig:
    """Parse a bot configuration dict from the store into a BotConfig."""
    missing = [k for k in REQUIRED_BOT_FIELDS if data.get(k) in (None, "")]
    if missing:
        raise ValidationError(f"missing required fields: {', '.join(missing)}")

    symbol, display = normalize_pair(str(data["pair"]))
    try:
        upper = float(data["upper_limit"])
        lower = float(data["lower_limit"])
        grid_count = parse_grid_count(data["grid_count"])
        investment = float(data["investment"])
        grid_type = GridType(data.get("grid_type") or GridType.ARITHMETIC)
        status = BotStatus(data.get("status") or BotStatus.ACTIVE)
    except (TypeError, ValueError) as e:
        raise ValidationError(str(e)) from e

    return BotConfig(
        id=str(data.get("id") or symbol.lower()),
        pair=symbol,
        display_pair=data.get("display_pair") or display,
        upper_limit=upper,
        lower_limit=lower,
        grid_count=grid_count,
        grid_type=grid_type,
        investment=investment,
        started_at=parse_started_at(data["started_at"]),
        notes=data.get("notes"),
        status=status,
        owner_id=str(data.get("owner_id") or owner_id),
    )
