"""Fleet orchestration: the single live-or-demo decision point.

    no credentials ------------------------------> demo
    credentials -> validate -- invalid ----------> demo
                            \\- valid, no bots ---> live (empty)
                             \\- valid, bots -----> reconstruct all -> live
    unexpected error anywhere above -------------> demo

Per-bot sub-request failures never reach this level (the reconstructor
absorbs them). An exception escaping one bot's reconstruction is replaced by
a zero-filled placeholder for that bot only.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from .bot_state import BotState, FleetMode, FleetResult, placeholder_state
from .demo import DemoSynthesizer
from .exchange import PhemexClient
from .models import BotConfig, Credentials
from .reconstructor import BotReconstructor

logger = logging.getLogger(__name__)

MSG_NO_CREDENTIALS = "Demo mode - configure API keys for live data"
MSG_VALIDATION_FAILED = "API key validation failed - showing demo data"
MSG_NO_BOTS = "No bots configured - add your first bot"
MSG_FLEET_ERROR = "Error fetching data - showing demo data"


class FleetOrchestrator:
    """Reconstructs every bot of one owner, falling back to demo data."""

    def __init__(
        self,
        client: PhemexClient,
        reconstructor: BotReconstructor | None = None,
        demo: DemoSynthesizer | None = None,
    ) -> None:
        self._client = client
        self._reconstructor = reconstructor or BotReconstructor(client)
        self._demo = demo or DemoSynthesizer()

    async def reconstruct_fleet(
        self,
        credentials: Credentials | None,
        bots: Sequence[BotConfig],
    ) -> FleetResult:
        if credentials is None:
            return self._demo_result(MSG_NO_CREDENTIALS)

        try:
            if not await self._client.validate_credentials(credentials):
                return self._demo_result(MSG_VALIDATION_FAILED)

            if not bots:
                return FleetResult(mode=FleetMode.LIVE, bots=(), message=MSG_NO_BOTS)

            states = await self._reconstruct_all(credentials, bots)
        except Exception:
            logger.exception("Fleet reconstruction failed; serving demo data")
            return self._demo_result(MSG_FLEET_ERROR)

        logger.info(
            "Reconstructed %d bot(s) for %s", len(states), credentials.masked_key
        )
        return FleetResult(mode=FleetMode.LIVE, bots=tuple(states))

    async def _reconstruct_all(
        self, credentials: Credentials, bots: Sequence[BotConfig]
    ) -> list[BotState]:
        # Wait for every bot; one failing bot must not cancel the others.
        results = await asyncio.gather(
            *(self._reconstructor.reconstruct(credentials, bot) for bot in bots),
            return_exceptions=True,
        )

        states: list[BotState] = []
        for bot, result in zip(bots, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.error(
                    "Failed to reconstruct bot %s (%s): %s", bot.id, bot.pair, result
                )
                states.append(placeholder_state(bot))
            else:
                states.append(result)
        return states

    def _demo_result(self, message: str) -> FleetResult:
        logger.info("Serving demo fleet: %s", message)
        return FleetResult(
            mode=FleetMode.DEMO, bots=self._demo.generate(), message=message
        )
