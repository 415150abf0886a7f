"""Tests for bot configuration parsing."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from gridwatch.errors import ValidationError
from gridwatch.grid import GridType
from gridwatch.models import (
    BotStatus,
    Credentials,
    normalize_pair,
    parse_bot_config,
    parse_started_at,
)


def _bot_data(**overrides) -> dict:
    data = {
        "pair": "btc/usdt",
        "upper_limit": 72000,
        "lower_limit": 62000,
        "grid_count": 20,
        "investment": 5000,
        "started_at": "2026-10-09T12:00:00Z",
    }
    data.update(overrides)
    return data


class TestNormalizePair:
    def test_with_separator(self) -> None:
        assert normalize_pair("btc/usdt") == ("BTCUSDT", "BTC/USDT")

    def test_without_separator(self) -> None:
        assert normalize_pair("ETHUSDT") == ("ETHUSDT", "ETH/USDT")

    def test_whitespace(self) -> None:
        assert normalize_pair("  sol/usdt ") == ("SOLUSDT", "SOL/USDT")


class TestParseStartedAt:
    def test_iso_with_z(self) -> None:
        assert parse_started_at("2026-10-09T12:00:00Z") == datetime(
            2026, 10, 9, 12, tzinfo=timezone.utc
        )

    def test_naive_taken_as_utc(self) -> None:
        dt = parse_started_at(datetime(2026, 1, 1))
        assert dt.tzinfo is timezone.utc

    def test_epoch_millis(self) -> None:
        dt = parse_started_at(1_700_000_000_000)
        assert dt == datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)

    @pytest.mark.parametrize("value", ["yesterday", None, True, [2026]])
    def test_invalid(self, value) -> None:
        with pytest.raises(ValidationError):
            parse_started_at(value)


class TestParseBotConfig:
    def test_defaults(self) -> None:
        bot = parse_bot_config(_bot_data())
        assert bot.id == "btcusdt"
        assert bot.pair == "BTCUSDT"
        assert bot.display_pair == "BTC/USDT"
        assert bot.grid_type is GridType.ARITHMETIC
        assert bot.status is BotStatus.ACTIVE
        assert bot.owner_id == "default"
        assert bot.notes is None
        assert bot.started_at_ms == 1_791_547_200_000

    def test_explicit_fields(self) -> None:
        bot = parse_bot_config(
            _bot_data(id="b1", grid_type="geometric", status="paused", notes="hi"),
            owner_id="alice",
        )
        assert bot.id == "b1"
        assert bot.grid_type is GridType.GEOMETRIC
        assert bot.status is BotStatus.PAUSED
        assert bot.notes == "hi"
        assert bot.owner_id == "alice"

    def test_numeric_strings_accepted(self) -> None:
        bot = parse_bot_config(_bot_data(upper_limit="72000.5", grid_count="10"))
        assert bot.upper_limit == 72000.5
        assert bot.grid_count == 10

    def test_missing_fields(self) -> None:
        data = _bot_data()
        del data["pair"]
        data["investment"] = ""
        with pytest.raises(ValidationError, match="pair, investment"):
            parse_bot_config(data)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"grid_count": 0},
            {"upper_limit": 62000},
            {"lower_limit": -1},
            {"investment": -10},
            {"grid_type": "fibonacci"},
            {"grid_count": "many"},
            {"grid_count": 2.7},
            {"grid_count": "2.7"},
            {"grid_count": True},
            {"status": "exploded"},
            {"lower_limit": "nan"},
            {"upper_limit": "inf"},
            {"investment": "nan"},
            {"investment": float("inf")},
        ],
    )
    def test_rejected(self, overrides) -> None:
        with pytest.raises(ValidationError):
            parse_bot_config(_bot_data(**overrides))

    def test_whole_float_grid_count_accepted(self) -> None:
        assert parse_bot_config(_bot_data(grid_count=12.0)).grid_count == 12


class TestCredentials:
    def test_masked_key(self) -> None:
        creds = Credentials(api_key="abcd1234efgh5678", api_secret="x")
        assert creds.masked_key == "abcd****5678"

    def test_short_key_fully_masked(self) -> None:
        assert Credentials(api_key="abc", api_secret="x").masked_key == "********"

    def test_secret_not_in_repr(self) -> None:
        creds = Credentials(api_key="abcd1234efgh5678", api_secret="topsecret")
        assert "topsecret" not in repr(creds)
