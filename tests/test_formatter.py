"""Tests for Telegram HTML message formatting."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

from gridwatch.bot_state import BotState, FleetMode, FleetResult, StateSnapshot
from gridwatch.formatter import (
    _fp,
    _format_spacing,
    format_bot_status,
    format_fleet_status,
    format_grid_ladder,
    format_mode_alert,
    format_periodic_update,
    format_startup_message,
    format_updated_at,
)


class TestFormatPrice:
    """Test the price formatting helper."""

    def test_normal_price(self) -> None:
        assert _fp(1.50) == "1.50"
        assert _fp(99.99) == "99.99"

    def test_tiny_price(self) -> None:
        assert _fp(0.50) == "0.5000"
        assert _fp(0.005) == "0.005000"

    def test_thousands(self) -> None:
        assert _fp(1000.0) == "1,000"
        assert _fp(3500.50) == "3,500.50"

    def test_large_price(self) -> None:
        assert _fp(67245.5) == "67,245.50"
        assert _fp(100000.75) == "100,000.75"

    def test_rounding_carries(self) -> None:
        assert _fp(1999.999) == "2,000"


class TestFormatSpacing:
    def test_geometric_equal(self) -> None:
        assert _format_spacing((1.05, 1.05)) == "1.05%"

    def test_arithmetic_range(self) -> None:
        result = _format_spacing((1.80, 3.20))
        assert "1.80%" in result
        assert "3.20%" in result

    def test_small_spacing(self) -> None:
        assert _format_spacing((0.500, 0.500)) == "0.500%"


class TestFormatBotStatus:
    """Test full status format (/status command)."""

    def test_content(self, btc_state: BotState) -> None:
        result = format_bot_status(btc_state)
        assert "BTC/USDT spot grid" in result
        assert "btc-1 · active" in result
        assert "$67,245.50" in result
        assert "10d 0h 0m" in result
        assert "189.33" in result  # total pnl
        assert "+234.56" in result
        assert "-45.23" in result
        assert "12.34" in result
        assert "+3.79%" in result
        assert "$62,000 – $72,000" in result
        assert "20 arithmetic" in result
        assert "$5,000" in result

    def test_no_price(self, btc_state: BotState) -> None:
        result = format_bot_status(replace(btc_state, current_price=0.0))
        assert "$67,245.50" not in result
        assert "—" in result


class TestHtmlEscaping:
    """User-declared ids and pairs must not break ParseMode.HTML."""

    @staticmethod
    def _state(btc_state: BotState) -> BotState:
        config = replace(btc_state.config, id="a<b&c", display_pair="BTC/<USDT>")
        return replace(btc_state, config=config)

    def test_bot_status(self, btc_state: BotState) -> None:
        result = format_bot_status(self._state(btc_state))
        assert "<code>a&lt;b&amp;c · active</code>" in result
        assert "BTC/&lt;USDT&gt; spot grid" in result
        assert "a<b" not in result

    def test_grid_ladder(self, btc_state: BotState) -> None:
        result = format_grid_ladder(self._state(btc_state))
        assert "<code>a&lt;b&amp;c</code>" in result

    def test_periodic_update(self, btc_state: BotState) -> None:
        result = format_periodic_update(self._state(btc_state), None)
        assert result.startswith("<b>a&lt;b&amp;c</b>  BTC/&lt;USDT&gt;")

    def test_startup_message(self) -> None:
        assert "x&lt;y" in format_startup_message(["x<y"], None)


class TestFormatFleetStatus:
    def test_live_has_no_banner(self, btc_state: BotState) -> None:
        result = format_fleet_status(FleetResult(mode=FleetMode.LIVE, bots=(btc_state,)))
        assert "DEMO" not in result
        assert result.startswith("<b>BTC/USDT spot grid</b>")

    def test_demo_banner(self, btc_state: BotState) -> None:
        result = format_fleet_status(
            FleetResult(
                mode=FleetMode.DEMO,
                bots=(btc_state, btc_state),
                message="Demo mode - configure API keys for live data",
            )
        )
        assert result.startswith(
            "<b>DEMO DATA</b> — Demo mode - configure API keys for live data"
        )
        assert result.count("spot grid") == 2
        assert "────" in result

    def test_empty_fleet_shows_message(self) -> None:
        result = format_fleet_status(
            FleetResult(mode=FleetMode.LIVE, message="No bots configured - add your first bot")
        )
        assert result == "No bots configured - add your first bot"


class TestFormatGridLadder:
    def test_marker_between_levels(self, btc_state: BotState) -> None:
        lines = format_grid_ladder(btc_state).splitlines()
        assert lines[0].startswith("<b>BTC/USDT grid</b>")
        assert lines[1:] == [
            "  $72,000",
            "  $69,500",
            "<b>▶ $67,245.50</b>",
            "  $67,000",
            "  $64,500",
            "  $62,000",
        ]

    def test_marker_below_range(self, btc_state: BotState) -> None:
        lines = format_grid_ladder(replace(btc_state, current_price=61000.0)).splitlines()
        assert lines[-1] == "<b>▶ $61,000</b>"

    def test_marker_above_range(self, btc_state: BotState) -> None:
        lines = format_grid_ladder(replace(btc_state, current_price=73000.0)).splitlines()
        assert lines[1] == "<b>▶ $73,000</b>"

    def test_no_price_no_marker(self, btc_state: BotState) -> None:
        result = format_grid_ladder(replace(btc_state, current_price=0.0))
        assert "▶" not in result

    def test_no_levels(self, btc_state: BotState) -> None:
        result = format_grid_ladder(replace(btc_state, grid_levels=()))
        assert "no grid levels" in result


class TestFormatPeriodicUpdate:
    """Test lightweight periodic update format."""

    def test_deltas(self, btc_state: BotState) -> None:
        prev = StateSnapshot(total_arbitrages=40, realized_pnl=200.0, total_fees=10.0)
        result = format_periodic_update(btc_state, prev)
        assert "btc-1" in result
        assert "arbitrages +7" in result
        assert "earned +32.22" in result
        assert "realized +34.56" in result
        assert "fees 2.34" in result

    def test_first_report(self, btc_state: BotState) -> None:
        result = format_periodic_update(btc_state, None)
        assert "arbitrages +47" in result
        assert "realized +234.56" in result

    def test_negative_earnings(self, btc_state: BotState) -> None:
        prev = StateSnapshot(total_arbitrages=47, realized_pnl=234.56, total_fees=10.0)
        result = format_periodic_update(btc_state, prev)
        assert "arbitrages +0" in result
        assert "earned -2.34" in result


class TestAlerts:
    def test_switched_to_demo(self) -> None:
        result = format_mode_alert(
            FleetMode.LIVE,
            FleetResult(mode=FleetMode.DEMO, message="Error fetching data - showing demo data"),
        )
        assert "switched to demo data" in result
        assert "Error fetching data" in result

    def test_live_restored(self) -> None:
        result = format_mode_alert(FleetMode.DEMO, FleetResult(mode=FleetMode.LIVE))
        assert "live data restored" in result

    def test_startup_message(self) -> None:
        result = format_startup_message(["btc-1", "eth-1"], "ak-1****7890")
        assert "btc-1, eth-1" in result
        assert "ak-1****7890" in result

    def test_startup_without_key(self) -> None:
        result = format_startup_message([], None)
        assert "no bots" in result
        assert "no api key (demo)" in result

    def test_updated_at(self) -> None:
        now = datetime(2026, 10, 19, 12, 5, tzinfo=timezone.utc)
        assert format_updated_at(now) == "<i>updated 2026-10-19 12:05 UTC</i>"
