"""Registration helpers for Word Rush handlers."""

from __future__ import annotations

import logging
from typing import Optional

from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes

from ..services import GameEngine
from .commands import VERBS, dispatch
from .transport import TelegramNameResolver

logger = logging.getLogger(__name__)

ENGINE_KEY = "wordrush_engine"
NAMES_KEY = "wordrush_names"


def parse_verb(text: Optional[str]) -> str:
    """Return the command word of ``/verb@bot args`` in lower case."""

    if not text:
        return ""
    token = text.strip().split(maxsplit=1)[0] if text.strip() else ""
    return token.lstrip("/").split("@", 1)[0].lower()


async def command_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Hand a Telegram command over to the engine."""

    message = update.effective_message
    chat = update.effective_chat
    user = update.effective_user
    if not message or not chat or not user:
        return
    names = context.bot_data.get(NAMES_KEY)
    if isinstance(names, TelegramNameResolver):
        names.remember(user)
    engine = context.bot_data.get(ENGINE_KEY)
    if not isinstance(engine, GameEngine):
        logger.error("Word Rush engine is not registered; ignoring %s", message.text)
        return
    verb = parse_verb(message.text)
    await dispatch(engine, chat.id, user.id, verb, list(context.args or []), origin=message)


def register_handlers(
    application: Optional[Application],
    engine: GameEngine,
    names: Optional[TelegramNameResolver] = None,
) -> None:
    """Attach Word Rush command handlers to the shared application."""

    if not application:
        return
    application.bot_data[ENGINE_KEY] = engine
    if names is not None:
        application.bot_data[NAMES_KEY] = names
    application.add_handler(CommandHandler(sorted(VERBS), command_handler, block=False))


__all__ = ["ENGINE_KEY", "NAMES_KEY", "command_handler", "parse_verb", "register_handlers"]
