"""HTML message formatting for Telegram.

Message styles:
  - format_fleet_status():    Full detailed summary (for /status command)
  - format_grid_ladder():     Price ladder of one bot (for /grid command)
  - format_periodic_update(): Lightweight interval update (for periodic reports)
"""

from __future__ import annotations

from datetime import datetime, timezone
from html import escape

from .bot_state import BotState, FleetMode, FleetResult, StateSnapshot
from .grid import grid_spacing_pct

SECTION_RULE = "\n\n" + "─" * 24 + "\n\n"


# ---------------------------------------------------------------------------
#  Full status (for /status command)
# ---------------------------------------------------------------------------


def format_fleet_status(result: FleetResult) -> str:
    """All bots of a fleet, headed by a demo banner when not live."""
    header = _format_mode_banner(result)
    if not result.bots:
        body = result.message or "no bots configured"
        return f"{header}\n{body}" if header else body

    sections = SECTION_RULE.join(format_bot_status(s) for s in result.bots)
    return f"{header}\n\n{sections}" if header else sections


def format_bot_status(state: BotState) -> str:
    """Full detailed status of one bot."""
    c = state.config
    pair, bot_id = escape(c.display_pair), escape(c.id)
    pnl_sign = "+" if state.total_pnl >= 0 else ""
    spacing = _format_spacing(grid_spacing_pct(list(state.grid_levels)))
    price = f"${_fp(state.current_price)}" if state.current_price > 0 else "—"

    return (
        f"<b>{pair} spot grid</b>  <code>{bot_id} · {c.status.value}</code>\n"
        f"\n"
        f"price            {price}\n"
        f"uptime           {state.runtime}\n"
        f"arbitrages       {state.total_arbitrages}\n"
        f"\n"
        f"<b>pnl</b>\n"
        f"  total          <b>{pnl_sign}{state.total_pnl:.2f}</b>\n"
        f"  realized       {state.realized_pnl:+.2f}\n"
        f"  unrealized     {state.unrealized_pnl:+.2f}\n"
        f"  fees           {state.total_fees:.2f}\n"
        f"  roi            {state.roi:+.2f}%\n"
        f"  apr            {state.apr:+.2f}%\n"
        f"\n"
        f"<b>grid</b>\n"
        f"  range          ${_fp(c.lower_limit)} – ${_fp(c.upper_limit)}\n"
        f"  zones          {c.grid_count} {c.grid_type.value}  ({spacing})\n"
        f"  investment     ${_fp(c.investment)}"
    )


def format_grid_ladder(state: BotState) -> str:
    """Grid levels from top to bottom, with the live price slotted in."""
    c = state.config
    lines = [f"<b>{escape(c.display_pair)} grid</b>  <code>{escape(c.id)}</code>"]
    if not state.grid_levels:
        lines.append("no grid levels")
        return "\n".join(lines)

    marker_placed = state.current_price <= 0
    for level in reversed(state.grid_levels):
        if not marker_placed and state.current_price >= level:
            lines.append(f"<b>▶ ${_fp(state.current_price)}</b>")
            marker_placed = True
        lines.append(f"  ${_fp(level)}")
    if not marker_placed:
        lines.append(f"<b>▶ ${_fp(state.current_price)}</b>")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
#  Periodic update (lightweight: just what matters between intervals)
# ---------------------------------------------------------------------------


def format_periodic_update(
    state: BotState, prev: StateSnapshot | None
) -> str:
    """Deltas since the last report: arbitrages, realized profit, fees."""
    prev = prev or StateSnapshot()
    new_arbs = state.total_arbitrages - prev.total_arbitrages
    pnl_delta = state.realized_pnl - prev.realized_pnl
    fees_delta = state.total_fees - prev.total_fees
    net_earned = pnl_delta - fees_delta

    net_sign = "+" if net_earned >= 0 else ""
    c = state.config
    return (
        f"<b>{escape(c.id)}</b>  {escape(c.display_pair)}  ${_fp(state.current_price)}\n"
        f"  arbitrages {new_arbs:+d}  ·  "
        f"earned {net_sign}{net_earned:.2f}  "
        f"(realized {pnl_delta:+.2f}, fees {fees_delta:.2f})"
    )


# ---------------------------------------------------------------------------
#  Alerts & startup messages
# ---------------------------------------------------------------------------


def format_mode_alert(previous: FleetMode | None, result: FleetResult) -> str:
    if result.mode is FleetMode.DEMO:
        reason = result.message or "live data unavailable"
        return f"<b>switched to demo data</b>\n{reason}"
    if previous is FleetMode.DEMO:
        return "<b>live data restored</b>"
    return "<b>live data</b>"


def format_startup_message(bot_ids: list[str], masked_key: str | None) -> str:
    bot_list = escape(", ".join(bot_ids)) if bot_ids else "no bots"
    account = masked_key or "no api key (demo)"
    return f"grid monitor started — watching {bot_list}\naccount {account}"


def format_updated_at(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"<i>updated {now.strftime('%Y-%m-%d %H:%M UTC')}</i>"


# ---------------------------------------------------------------------------
#  Helpers
# ---------------------------------------------------------------------------


def _format_mode_banner(result: FleetResult) -> str:
    if result.mode is FleetMode.LIVE:
        return ""
    reason = f" — {result.message}" if result.message else ""
    return f"<b>DEMO DATA</b>{reason}"


def _fp(price: float) -> str:
    """Format price with thousands separator and smart decimals."""
    if price >= 1000.0:
        whole = int(price)
        frac = round((price - whole) * 100)
        if frac == 100:
            whole, frac = whole + 1, 0
        formatted = f"{whole:,}"
        if frac > 0:
            return f"{formatted}.{frac:02d}"
        return formatted
    elif price >= 1.0:
        return f"{price:.2f}"
    elif price >= 0.01:
        return f"{price:.4f}"
    else:
        return f"{price:.6f}"


def _format_spacing(spacing: tuple[float, float]) -> str:
    """Format grid spacing. Single value for geometric, range for arithmetic."""
    min_s, max_s = spacing
    decimals = 3 if min_s < 1.0 else 2
    relative_diff = abs(max_s - min_s) / max(max_s, min_s) if max(max_s, min_s) > 0 else 0

    if relative_diff < 0.01:
        return f"{min_s:.{decimals}f}%"
    else:
        return f"{min_s:.{decimals}f}% – {max_s:.{decimals}f}%"
