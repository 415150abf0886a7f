"""Monitor: polls the fleet on an interval and drives Telegram reporting.

Each poll asks the FleetOrchestrator for a fresh FleetResult over the
owner's bots in the store, keeps the latest result for /status, and pushes
the first summary, periodic deltas and live/demo mode-change alerts.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone

from .bot_state import FleetMode, FleetResult, StateSnapshot
from .config import MonitorConfig
from .fleet import FleetOrchestrator
from .store import BotStore
from .telegram_bot import TelegramBot

logger = logging.getLogger(__name__)


class Monitor:
    """Periodic fleet fetcher with Telegram notifications."""

    def __init__(
        self,
        config: MonitorConfig,
        orchestrator: FleetOrchestrator,
        store: BotStore,
        telegram: TelegramBot | None = None,
    ) -> None:
        self._config = config
        self._orchestrator = orchestrator
        self._store = store
        self._telegram = telegram
        self._stop_event = asyncio.Event()

        self.latest_result: FleetResult | None = None
        self.last_fetch_at: datetime | None = None
        self._snapshots: dict[str, StateSnapshot] = {}
        self._initial_summary_sent = False
        self._last_alert_at: datetime | None = None

    async def fetch_once(self) -> FleetResult:
        """Reconstruct the fleet once and react to the outcome."""
        bots = self._store.list_bots(self._config.owner_id)
        result = await self._orchestrator.reconstruct_fleet(
            self._config.credentials(), bots
        )
        previous = self.latest_result
        self.latest_result = result
        self.last_fetch_at = datetime.now(timezone.utc)

        logger.info(
            "Fleet fetched: mode=%s bots=%d%s",
            result.mode.value,
            len(result.bots),
            f" ({result.message})" if result.message else "",
        )

        if previous is not None and previous.mode is not result.mode:
            await self._maybe_send_mode_alert(previous.mode, result)
        await self._maybe_send_initial_summary(result)
        return result

    async def run(self) -> None:
        """Run the poll loop and the periodic reporter until stopped."""
        tasks: list[asyncio.Task] = [asyncio.create_task(self._poll_loop())]

        interval = self._config.reporting.periodic_interval_minutes
        if interval > 0 and self._telegram is not None:
            tasks.append(asyncio.create_task(self._periodic_report_loop()))

        if self._telegram is not None and self._config.reporting.startup_notification:
            creds = self._config.credentials()
            bot_ids = [b.id for b in self._store.list_bots(self._config.owner_id)]
            await self._telegram.send_startup_message(
                bot_ids, creds.masked_key if creds else None
            )

        await asyncio.gather(*tasks, return_exceptions=True)

    async def stop(self) -> None:
        """Signal the loops to stop after their current iteration."""
        self._stop_event.set()

    # --- Loops ---

    async def _poll_loop(self) -> None:
        interval = self._config.reporting.refresh_interval_seconds
        while not self._stop_event.is_set():
            try:
                await self.fetch_once()
            except Exception as e:
                logger.error("Fleet fetch failed: %s", e)
            await self._sleep(interval)

    async def _periodic_report_loop(self) -> None:
        """Periodically send lightweight updates."""
        interval = self._config.reporting.periodic_interval_minutes * 60
        while not self._stop_event.is_set():
            if await self._sleep(interval):
                break
            await self.send_periodic_update()

    async def send_periodic_update(self) -> None:
        result = self.latest_result
        if result is None or self._telegram is None:
            return
        logger.info("Sending periodic update...")
        await self._telegram.send_periodic_update(result, self._snapshots)
        self._snapshot(result)

    async def _sleep(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; True if stop was requested meanwhile."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True

    # --- Notifications ---

    async def _maybe_send_initial_summary(self, result: FleetResult) -> None:
        """Send the full summary once, when the first fleet result arrives."""
        if self._initial_summary_sent or self._telegram is None:
            return
        self._initial_summary_sent = True
        self._snapshot(result)
        await self._telegram.send_fleet_summary(result)

    async def _maybe_send_mode_alert(
        self, previous: FleetMode, result: FleetResult
    ) -> None:
        """Send a live/demo switch alert if not in cooldown."""
        if self._telegram is None:
            return
        now = datetime.now()
        cooldown = timedelta(seconds=self._config.reporting.alert_cooldown_seconds)
        if self._last_alert_at and (now - self._last_alert_at) < cooldown:
            logger.debug("Mode alert suppressed (cooldown)")
            return

        self._last_alert_at = now
        await self._telegram.send_mode_alert(previous, result)

    def _snapshot(self, result: FleetResult) -> None:
        """Save current values for computing deltas in the next interval."""
        self._snapshots = {s.id: StateSnapshot.of(s) for s in result.bots}
