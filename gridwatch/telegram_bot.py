"""Telegram bot for command handling and message sending.

Handles /status, /grid and /help commands from Telegram users, and provides
a sender interface for the Monitor to push updates.
"""

from __future__ import annotations

import logging
from html import escape
from typing import TYPE_CHECKING

from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import Application, CommandHandler, ContextTypes

from .config import TelegramConfig
from .formatter import (
    format_bot_status,
    format_fleet_status,
    format_grid_ladder,
    format_mode_alert,
    format_periodic_update,
    format_startup_message,
    format_updated_at,
)

if TYPE_CHECKING:
    from .bot_state import FleetMode, FleetResult, StateSnapshot

logger = logging.getLogger(__name__)

# Telegram message length limit
MAX_MESSAGE_LENGTH = 4096


class TelegramBot:
    """Telegram bot with command handlers and message sending capabilities."""

    def __init__(self, config: TelegramConfig) -> None:
        self._chat_id = int(config.chat_id)
        self._monitor = None  # Set via set_monitor() to break circular dep
        self._app = Application.builder().token(config.bot_token).build()
        self._app.add_handler(CommandHandler("status", self._cmd_status))
        self._app.add_handler(CommandHandler("grid", self._cmd_grid))
        self._app.add_handler(CommandHandler("help", self._cmd_help))

    def set_monitor(self, monitor: object) -> None:
        """Wire the monitor reference (called after both are constructed)."""
        self._monitor = monitor

    async def start(self) -> None:
        """Start the Telegram bot polling loop."""
        await self._app.initialize()
        await self._app.start()
        await self._app.updater.start_polling()
        logger.info("Telegram bot polling started")

    async def stop(self) -> None:
        """Stop the Telegram bot."""
        try:
            await self._app.updater.stop()
            await self._app.stop()
            await self._app.shutdown()
            logger.info("Telegram bot stopped")
        except Exception as e:
            logger.error("Error stopping Telegram bot: %s", e)

    # --- Command Handlers ---

    async def _cmd_status(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        """Handle /status — full detailed summary."""
        if not self._monitor or not update.message:
            return

        result: FleetResult | None = self._monitor.latest_result
        args = context.args or []
        if result is None:
            msg = "no data yet — first fetch in progress"
        elif args:
            state = result.get(args[0])
            if state is not None:
                msg = format_bot_status(state)
            else:
                msg = self._unknown_bot(args[0], result)
        else:
            msg = format_fleet_status(result)

        if result is not None:
            msg = f"{msg}\n\n{format_updated_at(self._monitor.last_fetch_at)}"
        await self._send_safe(update.message.chat_id, msg)

    async def _cmd_grid(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        """Handle /grid <bot_id> — price ladder with the live price."""
        if not self._monitor or not update.message:
            return

        result: FleetResult | None = self._monitor.latest_result
        args = context.args or []
        if result is None:
            msg = "no data yet — first fetch in progress"
        elif not args:
            msg = "usage: /grid &lt;bot_id&gt;"
        else:
            state = result.get(args[0])
            if state is not None:
                msg = format_grid_ladder(state)
            else:
                msg = self._unknown_bot(args[0], result)

        await self._send_safe(update.message.chat_id, msg)

    async def _cmd_help(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        """Handle /help command."""
        if not update.message:
            return

        msg = (
            "/status — full status of all bots\n"
            "/status &lt;bot_id&gt; — status of one bot\n"
            "/grid &lt;bot_id&gt; — grid ladder of one bot\n"
            "/help — this message"
        )
        await update.message.reply_text(msg, parse_mode=ParseMode.HTML)

    @staticmethod
    def _unknown_bot(bot_id: str, result: FleetResult) -> str:
        available = escape(", ".join(s.id for s in result.bots)) or "none"
        return f"unknown bot: {escape(bot_id)}\navailable: {available}"

    # --- Sender Interface (called by Monitor) ---

    async def send_startup_message(
        self, bot_ids: list[str], masked_key: str | None
    ) -> None:
        """Send lightweight startup notification."""
        msg = format_startup_message(bot_ids, masked_key)
        await self._send_safe(self._chat_id, msg)

    async def send_fleet_summary(self, result: FleetResult) -> None:
        """Send the full fleet summary (after the first successful fetch)."""
        await self._send_safe(self._chat_id, format_fleet_status(result))

    async def send_mode_alert(
        self, previous: FleetMode | None, result: FleetResult
    ) -> None:
        """Send an alert when the fleet switches between live and demo."""
        await self._send_safe(self._chat_id, format_mode_alert(previous, result))

    async def send_periodic_update(
        self,
        result: FleetResult,
        snapshots: dict[str, StateSnapshot],
    ) -> None:
        """Send lightweight periodic update — only what changed."""
        if not result.bots:
            return

        sections = [
            format_periodic_update(state, snapshots.get(state.id))
            for state in result.bots
        ]
        msg = "\n".join(sections)
        if result.is_demo:
            msg = f"<b>DEMO DATA</b>\n{msg}"
        await self._send_safe(self._chat_id, msg)

    # --- Internal Helpers ---

    async def _send_safe(self, chat_id: int, text: str) -> None:
        """Send a message, splitting if it exceeds Telegram's limit."""
        if len(text) <= MAX_MESSAGE_LENGTH:
            try:
                await self._app.bot.send_message(
                    chat_id, text, parse_mode=ParseMode.HTML
                )
            except Exception as e:
                logger.error("Failed to send Telegram message: %s", e)
        else:
            chunks = self._split_message(text)
            for chunk in chunks:
                try:
                    await self._app.bot.send_message(
                        chat_id, chunk, parse_mode=ParseMode.HTML
                    )
                except Exception as e:
                    logger.error("Failed to send Telegram chunk: %s", e)

    @staticmethod
    def _split_message(text: str) -> list[str]:
        """Split a long message into chunks that fit Telegram's limit."""
        chunks: list[str] = []
        current = ""

        for line in text.split("\n"):
            if len(current) + len(line) + 1 > MAX_MESSAGE_LENGTH:
                if current:
                    chunks.append(current.rstrip())
                current = line + "\n"
            else:
                current += line + "\n"

        if current.strip():
            chunks.append(current.rstrip())

        return chunks if chunks else [text[:MAX_MESSAGE_LENGTH]]
