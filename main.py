"""Grid bot monitor — Entry Point.

Reconstructs the live state of Phemex spot grid bots from the exchange API
and reports it to Telegram, falling back to demo data when live data is
unavailable.

Usage:
    python main.py configs/production.yaml
    python main.py configs/production.yaml --once   # print one fetch as JSON
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal
import sys

from gridwatch.config import MonitorConfig, load_config
from gridwatch.demo import DemoSynthesizer
from gridwatch.exchange import PhemexClient
from gridwatch.fleet import FleetOrchestrator
from gridwatch.logging_utils import configure_logging
from gridwatch.monitor import Monitor
from gridwatch.store import InMemoryBotStore
from gridwatch.telegram_bot import TelegramBot
from gridwatch.transport import SignedTransport

logger = logging.getLogger(__name__)


def build_client(config: MonitorConfig) -> PhemexClient:
    ex = config.exchange
    transport = SignedTransport(
        base_url=ex.base_url,
        timeout=ex.timeout_seconds,
        max_retries=ex.max_retries,
        retry_backoff_seconds=ex.retry_backoff_seconds,
        max_retry_delay_seconds=ex.max_retry_delay_seconds,
    )
    return PhemexClient(transport)


async def main() -> int:
    parser = argparse.ArgumentParser(description="Grid Bot Monitor Daemon")
    parser.add_argument(
        "config_file",
        help="Path to the YAML configuration file",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Fetch the fleet once, print it as JSON and exit",
    )
    args = parser.parse_args()

    # Load config
    config = load_config(args.config_file)
    # --once writes JSON to stdout, so logs go to stderr
    configure_logging(
        config.logging.level, sys.stderr if args.once else sys.stdout
    )

    store = InMemoryBotStore(config.bot_configs())

    async with build_client(config) as client:
        orchestrator = FleetOrchestrator(
            client, demo=DemoSynthesizer(seed=config.demo.seed)
        )

        if args.once:
            monitor = Monitor(config, orchestrator, store)
            result = await monitor.fetch_once()
            json.dump(result.to_dict(), sys.stdout, indent=2)
            sys.stdout.write("\n")
            return 0

        if config.telegram is None:
            logger.error("telegram section is required unless --once is given")
            return 2

        logger.info(
            "Starting grid monitor with %d bot(s)...", len(config.bots)
        )

        telegram_bot = TelegramBot(config.telegram)
        monitor = Monitor(config, orchestrator, store, telegram_bot)
        telegram_bot.set_monitor(monitor)

        # Signal handling for graceful shutdown
        loop = asyncio.get_running_loop()
        stop_event = asyncio.Event()

        def _signal_handler() -> None:
            logger.info("Shutdown signal received...")
            stop_event.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, _signal_handler)

        await telegram_bot.start()
        monitor_task = asyncio.create_task(monitor.run())

        await stop_event.wait()

        # Graceful shutdown
        logger.info("Shutting down...")
        await monitor.stop()
        try:
            await asyncio.wait_for(monitor_task, timeout=10)
        except asyncio.TimeoutError:
            monitor_task.cancel()

        await telegram_bot.stop()
        logger.info("Monitor stopped.")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
