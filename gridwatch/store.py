"""Bot configuration store.

The reconstruction engine only reads bot configurations; writes belong to
whatever owns persistence. ``BotStore`` is the lookup/CRUD surface keyed by
bot id and owner id, and ``InMemoryBotStore`` backs it for the daemon, seeded
from the YAML config.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Any, Protocol

from .errors import BotNotFoundError, ValidationError
from .grid import GridType
from .models import (
    BotConfig,
    BotStatus,
    normalize_pair,
    parse_bot_config,
    parse_grid_count,
    parse_started_at,
)

logger = logging.getLogger(__name__)


class BotStore(Protocol):
    def list_bots(self, owner_id: str) -> list[BotConfig]: ...

    def get_bot(self, bot_id: str, owner_id: str) -> BotConfig: ...

    def add_bot(self, owner_id: str, data: dict[str, Any]) -> BotConfig: ...

    def update_bot(
        self, bot_id: str, owner_id: str, changes: dict[str, Any]
    ) -> BotConfig: ...

    def delete_bot(self, bot_id: str, owner_id: str) -> None: ...


class InMemoryBotStore:
    """Dict-backed BotStore. Every operation checks ownership."""

    def __init__(self, bots: list[BotConfig] | None = None) -> None:
        self._bots: dict[str, BotConfig] = {}
        for bot in bots or []:
            self._bots[bot.id] = bot

    def list_bots(self, owner_id: str) -> list[BotConfig]:
        """Bots of ``owner_id``, most recently started first."""
        owned = [b for b in self._bots.values() if b.owner_id == owner_id]
        return sorted(owned, key=lambda b: b.started_at, reverse=True)

    def get_bot(self, bot_id: str, owner_id: str) -> BotConfig:
        bot = self._bots.get(bot_id)
        if bot is None or bot.owner_id != owner_id:
            raise BotNotFoundError(f"Bot not found: {bot_id}")
        return bot

    def add_bot(self, owner_id: str, data: dict[str, Any]) -> BotConfig:
        data = {**data, "owner_id": owner_id}
        data.setdefault("id", uuid.uuid4().hex[:12])
        bot = parse_bot_config(data, owner_id=owner_id)
        if bot.id in self._bots:
            raise ValidationError(f"Bot id already exists: {bot.id}")
        self._bots[bot.id] = bot
        logger.info("Added bot %s (%s) for %s", bot.id, bot.pair, owner_id)
        return bot

    def update_bot(
        self, bot_id: str, owner_id: str, changes: dict[str, Any]
    ) -> BotConfig:
        """Apply a partial update; only keys present in ``changes`` are touched."""
        bot = self.get_bot(bot_id, owner_id)
        fields: dict[str, Any] = {}
        try:
            if changes.get("pair"):
                fields["pair"], fields["display_pair"] = normalize_pair(
                    str(changes["pair"])
                )
            for key in ("upper_limit", "lower_limit", "investment"):
                if changes.get(key) is not None:
                    fields[key] = float(changes[key])
            if changes.get("grid_count") is not None:
                fields["grid_count"] = parse_grid_count(changes["grid_count"])
            if changes.get("grid_type") is not None:
                fields["grid_type"] = GridType(changes["grid_type"])
            if changes.get("status") is not None:
                fields["status"] = BotStatus(changes["status"])
        except (TypeError, ValueError) as e:
            raise ValidationError(str(e)) from e
        if changes.get("started_at") is not None:
            fields["started_at"] = parse_started_at(changes["started_at"])
        if "notes" in changes:
            fields["notes"] = changes["notes"]

        # replace() re-runs BotConfig validation on the merged fields
        updated = replace(bot, **fields)
        self._bots[bot_id] = updated
        logger.info("Updated bot %s for %s", bot_id, owner_id)
        return updated

    def delete_bot(self, bot_id: str, owner_id: str) -> None:
        self.get_bot(bot_id, owner_id)
        del self._bots[bot_id]
        logger.info("Deleted bot %s for %s", bot_id, owner_id)

