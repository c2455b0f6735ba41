"""Chat texts for Word Rush announcements and rejections."""

from __future__ import annotations

import html
from typing import Iterable, Optional

from telegram.helpers import mention_html

from ..errors import RejectionReason
from ..state import GameSession, PlayerState, RoundOutcome
from ..state.rules import BASE_TIME, BASE_WORD_LENGTH

REACTION_OK = "👍"
REACTION_REJECT = "👎"
REACTION_GAME = "⚡"
REACTION_WIN = "🏆"
REACTION_END = "🤝"
REACTION_FORFEIT = "😢"


def format_name(name: str) -> str:
    return f"<b>{html.escape(name)}</b>"


def format_player(player: PlayerState) -> str:
    """Bold name that links to, and notifies, the player."""

    return f"<b>{mention_html(player.user_id, player.name)}</b>"


def format_names(players: Iterable[PlayerState]) -> str:
    return ", ".join(format_player(p) for p in players)


def lobby_opened(session: GameSession, host: PlayerState) -> str:
    base_time = BASE_TIME[session.difficulty]
    return (
        f"🎲 Word game lobby started on <b>{session.difficulty.value}</b> mode by {format_player(host)}!\n"
        f"⏱️ Starting time: {base_time} seconds\n"
        f"📏 Starting word length: {BASE_WORD_LENGTH} letters\n\n"
        "Use /wjoin to join, /wordgame easy|medium|hard to set difficulty, or /wstart to begin."
    )


def player_joined(session: GameSession, player: PlayerState) -> str:
    return f"{format_player(player)} joined the word game! Current players: {len(session.players)}"


def difficulty_changed(session: GameSession) -> str:
    return (
        f"Difficulty set to <b>{session.difficulty.value}</b>. "
        f"Starting time: {BASE_TIME[session.difficulty]} seconds."
    )


def round_started(session: GameSession) -> str:
    return (
        f"Round {session.round}: submit a word starting with <b>{session.current_letter}</b> "
        f"(min {session.min_word_length} letters) with /w &lt;word&gt;. "
        f"Time: {session.time_limit} seconds!\n"
        f"Players: {format_names(session.players)}\n\n"
        "Round progression: time ⏱️ decreases, word length 📏 increases!"
    )


def word_accepted(player: PlayerState, word: str) -> str:
    return f"{format_player(player)} submitted <b>{html.escape(word)}</b>!"


def round_resolved(outcome: RoundOutcome, *, timed_out: bool) -> str:
    lines = []
    if outcome.eliminated:
        prefix = "⏰ Time's up! " if timed_out else ""
        lines.append(f"{prefix}Eliminated: {format_names(outcome.eliminated)}")
    lines.append(_standing(outcome))
    return "\n".join(lines)


def player_forfeited(player: PlayerState, outcome: RoundOutcome) -> str:
    return f"{format_player(player)} has forfeited!\n{_standing(outcome)}"


def game_ended_by(player: PlayerState) -> str:
    return f"Word game ended by {format_player(player)}."


def _standing(outcome: RoundOutcome) -> str:
    winner = outcome.winner
    if winner is not None:
        return f"🏆 Game over! Winner: {format_player(winner)}"
    if not outcome.remaining:
        return "🏁 Game over! No winner, every player was eliminated."
    return f"🎯 Remaining: {format_names(outcome.remaining)}\n🔄 Next round starting..."


_REJECTION_TEXTS = {
    RejectionReason.NO_LOBBY: "No active word game lobby. Start one with /wordgame [easy|medium|hard].",
    RejectionReason.ALREADY_JOINED: "{name}, you're already in the lobby!",
    RejectionReason.NOT_ENOUGH_PLAYERS: "Need at least {min_players} players to start!",
    RejectionReason.NO_ACTIVE_ROUND: "No active word game round. Wait for the next round or start a game.",
    RejectionReason.NOT_A_PLAYER: "{name}, you're not in this game!",
    RejectionReason.ALREADY_SUBMITTED: "{name}, you already submitted a word this round!",
    RejectionReason.INVALID_FORMAT: "{name}, the word may only contain letters A-Z.",
    RejectionReason.TOO_SHORT: "{name}, the word must be at least {min_length} letters long.",
    RejectionReason.WRONG_LETTER: "{name}, the word must start with \"{letter}\".",
    RejectionReason.NOT_A_WORD: "{name}, \"{word}\" is not a valid dictionary word.",
    RejectionReason.ALREADY_USED_IN_GAME: "{name}, \"{word}\" has already been used in this game.",
    RejectionReason.ALREADY_USED_IN_ROUND: "{name}, \"{word}\" has already been submitted in this round.",
    RejectionReason.SESSION_ALREADY_ACTIVE: "A word game is already active!",
}


def rejection(
    reason: RejectionReason,
    *,
    player: Optional[PlayerState] = None,
    word: Optional[str] = None,
    session: Optional[GameSession] = None,
    min_players: int = 2,
) -> str:
    letter = (session.current_letter if session else None) or "?"
    return _REJECTION_TEXTS[reason].format(
        name=format_player(player) if player else format_name("Player"),
        word=html.escape(word or ""),
        letter=letter,
        min_players=min_players,
        min_length=session.min_word_length if session else BASE_WORD_LENGTH,
    )


GENERIC_ERROR = "An error occurred in the word game. Please try again."


__all__ = [
    "GENERIC_ERROR",
    "REACTION_END",
    "REACTION_FORFEIT",
    "REACTION_GAME",
    "REACTION_OK",
    "REACTION_REJECT",
    "REACTION_WIN",
    "difficulty_changed",
    "format_name",
    "format_player",
    "game_ended_by",
    "lobby_opened",
    "player_forfeited",
    "player_joined",
    "rejection",
    "round_resolved",
    "round_started",
    "word_accepted",
]
