"""Command routing and Telegram handlers for Word Rush."""

from .commands import VERBS, dispatch
from .router import command_handler, parse_verb, register_handlers
from .transport import TelegramNameResolver, TelegramNotifier

__all__ = [
    "TelegramNameResolver",
    "TelegramNotifier",
    "VERBS",
    "command_handler",
    "dispatch",
    "parse_verb",
    "register_handlers",
]
