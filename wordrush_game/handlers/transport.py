"""Telegram implementations of the engine's notifier and name resolver."""

from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence

from telegram import Bot, Message, User
from telegram.helpers import mention_html

logger = logging.getLogger(__name__)

# Invisible link text: the user is notified without repeating their name.
SILENT_MENTION_TEXT = "\u200b"


class TelegramNotifier:
    """Send engine notifications through the Telegram Bot API."""

    def __init__(self, bot: Bot) -> None:
        self._bot = bot

    async def send_text(self, chat_id: int, text: str, mentioned_ids: Sequence[int] = ()) -> None:
        """Send ``text`` as HTML, mentioning every id in ``mentioned_ids``.

        Players already linked in the text are left as they are; the rest get
        an invisible mention appended.
        """

        missing = [
            user_id
            for user_id in dict.fromkeys(mentioned_ids)
            if f'href="tg://user?id={user_id}"' not in text
        ]
        if missing:
            text += "".join(mention_html(user_id, SILENT_MENTION_TEXT) for user_id in missing)
        logger.debug("Sending to %s (mentions: %s): %s", chat_id, list(mentioned_ids), text)
        await self._bot.send_message(chat_id, text, parse_mode="HTML")

    async def send_reaction(self, origin: Message, emoji: str) -> None:
        await origin.set_reaction(emoji)


class TelegramNameResolver:
    """Resolve display names, preferring names already seen in updates."""

    def __init__(self, bot: Optional[Bot] = None) -> None:
        self._bot = bot
        self._names: Dict[int, str] = {}

    def remember(self, user: Optional[User]) -> None:
        if user is None:
            return
        name = _pick_name(user.full_name, user.username)
        if name:
            self._names[user.id] = name

    async def resolve(self, user_id: int) -> str:
        cached = self._names.get(user_id)
        if cached:
            return cached
        if self._bot is None:
            return ""
        chat = await self._bot.get_chat(user_id)
        name = _pick_name(getattr(chat, "full_name", None), getattr(chat, "username", None))
        if name:
            self._names[user_id] = name
        return name


def _pick_name(full_name: Optional[str], username: Optional[str]) -> str:
    return (full_name or username or "").strip()


__all__ = ["TelegramNameResolver", "TelegramNotifier"]
