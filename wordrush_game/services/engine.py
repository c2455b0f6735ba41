"""Game engine facade: lobby, rounds, submissions and elimination."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from functools import partial
from typing import Any, Awaitable, Iterable, Optional, Protocol, Sequence

from ..config import GameSettings
from ..errors import GameRejection, InvariantViolation, RejectionReason
from ..rendering import messages
from ..state import Difficulty, GameSession, Phase, PlayerState, SessionRegistry
from ..state import rules
from ..state.models import ChatId, UserId
from .timers import TimerManager
from .validator import record_submission, validate_submission
from .word_cache import Dictionary, WordCache

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def send_text(self, chat_id: ChatId, text: str, mentioned_ids: Sequence[UserId] = ()) -> Awaitable[None]: ...

    def send_reaction(self, origin: Any, emoji: str) -> Awaitable[None]: ...


class NameResolver(Protocol):
    def resolve(self, user_id: UserId) -> Awaitable[str]: ...


@dataclass(slots=True)
class SubmissionResult:
    accepted: bool
    word: str
    reason: Optional[RejectionReason] = None
    round_resolved: bool = False


class GameEngine:
    """Entry point for every player-facing Word Rush command.

    All state changes of a chat happen under that chat's registry lock.
    Dictionary lookups and outgoing notifications happen outside of it.
    """

    def __init__(
        self,
        notifier: Notifier,
        dictionary: Dictionary,
        names: NameResolver,
        *,
        registry: Optional[SessionRegistry] = None,
        timers: Optional[TimerManager] = None,
        word_cache: Optional[WordCache] = None,
        settings: Optional[GameSettings] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._notifier = notifier
        self._names = names
        self._registry = registry or SessionRegistry()
        self._timers = timers or TimerManager()
        self._words = word_cache or WordCache(dictionary)
        self._settings = settings or GameSettings()
        self._rng = rng

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    @property
    def timers(self) -> TimerManager:
        return self._timers

    @property
    def settings(self) -> GameSettings:
        return self._settings

    def get_session(self, chat_id: ChatId) -> Optional[GameSession]:
        return self._registry.get(chat_id)

    # Lobby ------------------------------------------------------------
    async def start_lobby(
        self,
        chat_id: ChatId,
        player_id: UserId,
        difficulty: Optional[Difficulty] = None,
        *,
        origin: Any = None,
    ) -> GameSession:
        name = await self._display_name(player_id)
        async with self._registry.lock(chat_id):
            host = PlayerState(user_id=player_id, name=name)
            session = self._registry.create(
                chat_id, host, difficulty or self._settings.default_difficulty
            )
            text = messages.lobby_opened(session, host)
        logger.info(
            "Word game lobby started in %s by %s, difficulty: %s",
            chat_id,
            player_id,
            session.difficulty.value,
        )
        await self._react(origin, messages.REACTION_GAME)
        await self._send(chat_id, text, [player_id])
        return session

    async def join(self, chat_id: ChatId, player_id: UserId, *, origin: Any = None) -> GameSession:
        name = await self._display_name(player_id)
        async with self._registry.lock(chat_id):
            session = self._registry.get(chat_id)
            if session is None or session.phase is not Phase.LOBBY:
                raise GameRejection(RejectionReason.NO_LOBBY)
            if session.has_player(player_id):
                raise GameRejection(RejectionReason.ALREADY_JOINED)
            player = PlayerState(user_id=player_id, name=name)
            session.add_player(player)
            text = messages.player_joined(session, player)
        logger.info("%s joined word game lobby in %s", player_id, chat_id)
        await self._react(origin, messages.REACTION_OK)
        await self._send(chat_id, text, [player_id])
        return session

    async def set_difficulty(
        self, chat_id: ChatId, difficulty: Difficulty, *, origin: Any = None
    ) -> GameSession:
        async with self._registry.lock(chat_id):
            session = self._registry.get(chat_id)
            if session is None:
                raise GameRejection(RejectionReason.NO_LOBBY)
            if session.phase is not Phase.LOBBY:
                raise GameRejection(RejectionReason.SESSION_ALREADY_ACTIVE)
            session.difficulty = difficulty
            text = messages.difficulty_changed(session)
        logger.info("Word game difficulty in %s set to %s", chat_id, difficulty.value)
        await self._react(origin, messages.REACTION_OK)
        await self._send(chat_id, text)
        return session

    async def start(self, chat_id: ChatId, *, origin: Any = None) -> GameSession:
        async with self._registry.lock(chat_id):
            session = self._registry.get(chat_id)
            if session is None or session.phase is not Phase.LOBBY:
                raise GameRejection(RejectionReason.NO_LOBBY)
            if len(session.players) < self._settings.min_players:
                raise GameRejection(RejectionReason.NOT_ENOUGH_PLAYERS)
            self._start_round_locked(session)
            text = messages.round_started(session)
            mentions = _ids(session.players)
        await self._react(origin, messages.REACTION_GAME)
        await self._send(chat_id, text, mentions)
        return session

    # Rounds -----------------------------------------------------------
    async def submit(
        self, chat_id: ChatId, player_id: UserId, word: Optional[str], *, origin: Any = None
    ) -> SubmissionResult:
        """Validate and record a word; resolve the round if it was the last one."""

        word = (word or "").strip()
        async with self._registry.lock(chat_id):
            session = self._registry.get(chat_id)
            reason = validate_submission(session, player_id, word)
            if reason is not None:
                logger.debug("Submission from %s in %s rejected early: %s", player_id, chat_id, reason.value)
                return SubmissionResult(accepted=False, word=word, reason=reason)
            expected_session = session
            expected_round = session.round

        exists = await self._words.is_valid_word(word)

        outcome: Optional[rules.RoundOutcome] = None
        async with self._registry.lock(chat_id):
            session = self._registry.get(chat_id)
            if session is not expected_session:
                # The game this word was meant for is gone.
                logger.debug("Submission from %s in %s outlived its game", player_id, chat_id)
                return SubmissionResult(accepted=False, word=word, reason=RejectionReason.NO_ACTIVE_ROUND)
            reason = validate_submission(
                session, player_id, word, word_exists=exists, expected_round=expected_round
            )
            if reason is not None:
                logger.debug("Submission from %s in %s rejected: %s", player_id, chat_id, reason.value)
                return SubmissionResult(accepted=False, word=word, reason=reason)
            record_submission(session, player_id, word)
            player = session.get_player(player_id)
            text = messages.word_accepted(player, word)
            logger.debug("Responses in %s after %s: %s", chat_id, player_id, session.responses)
            if session.all_responded() and session.claim_resolution():
                self._timers.cancel(chat_id)
                outcome = self._resolve_locked(session)

        logger.info("Word game move in %s, player: %s, word: %s", chat_id, player_id, word)
        await self._react(origin, messages.REACTION_OK)
        await self._send(chat_id, text, [player_id])
        if outcome is not None:
            await self._announce_outcome(chat_id, outcome, timed_out=False, origin=origin)
        return SubmissionResult(accepted=True, word=word, round_resolved=outcome is not None)

    async def forfeit(self, chat_id: ChatId, player_id: UserId, *, origin: Any = None) -> GameSession:
        """Drop a player from a started game; an active round is abandoned."""

        async with self._registry.lock(chat_id):
            session = self._registry.get(chat_id)
            if session is None or session.phase is Phase.LOBBY:
                raise GameRejection(RejectionReason.NO_ACTIVE_ROUND)
            if not session.has_player(player_id):
                raise GameRejection(RejectionReason.NOT_A_PLAYER)
            if session.phase is Phase.ROUND_ACTIVE:
                session.claim_resolution()
            self._timers.cancel(chat_id)
            player = session.remove_player(player_id)
            outcome = rules.settle(session, [])
            self._after_settle_locked(session, outcome)
            text = messages.player_forfeited(player, outcome)
        logger.info("%s forfeited the word game in %s", player_id, chat_id)
        await self._react(origin, messages.REACTION_FORFEIT)
        await self._send(chat_id, text, [player_id, *_ids(outcome.remaining)])
        return session

    async def end(self, chat_id: ChatId, player_id: UserId, *, origin: Any = None) -> None:
        async with self._registry.lock(chat_id):
            session = self._registry.get(chat_id)
            if session is None:
                raise GameRejection(RejectionReason.NO_ACTIVE_ROUND)
            player = session.get_player(player_id)
            if player is None:
                raise GameRejection(RejectionReason.NOT_A_PLAYER)
            self._timers.cancel(chat_id)
            self._registry.remove(chat_id)
        logger.info("Word game ended in %s by %s", chat_id, player_id)
        await self._react(origin, messages.REACTION_END)
        await self._send(chat_id, messages.game_ended_by(player), [player_id])

    async def handle_round_timeout(self, chat_id: ChatId, round_number: int) -> None:
        """Resolve ``round_number`` unless a full set of answers already did."""

        async with self._registry.lock(chat_id):
            session = self._registry.get(chat_id)
            if session is None or session.round != round_number:
                raise InvariantViolation(
                    f"round {round_number} timer fired for chat {chat_id} without its session"
                )
            if not session.claim_resolution():
                logger.debug("Round %s in %s was already resolved", round_number, chat_id)
                return
            logger.debug("Timer triggered for round %s in %s", round_number, chat_id)
            outcome = self._resolve_locked(session)
        await self._announce_outcome(chat_id, outcome, timed_out=True)

    async def handle_next_round(self, chat_id: ChatId, finished_round: int) -> None:
        async with self._registry.lock(chat_id):
            session = self._registry.get(chat_id)
            if (
                session is None
                or session.round != finished_round
                or session.phase is not Phase.ROUND_RESOLVING
            ):
                raise InvariantViolation(
                    f"next round timer fired for chat {chat_id} after round {finished_round} was superseded"
                )
            self._start_round_locked(session)
            text = messages.round_started(session)
            mentions = _ids(session.players)
        await self._send(chat_id, text, mentions)

    # Reporting --------------------------------------------------------
    async def report_rejection(
        self,
        chat_id: ChatId,
        reason: RejectionReason,
        *,
        player_id: Optional[UserId] = None,
        word: Optional[str] = None,
        origin: Any = None,
    ) -> None:
        """Tell the chat why a command was refused."""

        session = self._registry.get(chat_id)
        player: Optional[PlayerState] = None
        if player_id is not None:
            player = session.get_player(player_id) if session else None
            if player is None:
                player = PlayerState(user_id=player_id, name=await self._display_name(player_id))
        text = messages.rejection(
            reason,
            player=player,
            word=word,
            session=session,
            min_players=self._settings.min_players,
        )
        logger.debug("Rejected command in %s from %s: %s", chat_id, player_id, reason.value)
        await self._react(origin, messages.REACTION_REJECT)
        await self._send(chat_id, text, [player_id] if player_id is not None else [])

    async def report_failure(self, chat_id: ChatId, *, origin: Any = None) -> None:
        await self._react(origin, messages.REACTION_REJECT)
        await self._send(chat_id, messages.GENERIC_ERROR)

    def shutdown(self) -> None:
        """Stop every pending timer and forget all sessions."""

        self._timers.cancel_all()
        self._registry.reset()

    # Internal helpers -------------------------------------------------
    def _start_round_locked(self, session: GameSession) -> None:
        rules.begin_round(session, self._rng)
        self._timers.schedule(
            session.chat_id,
            session.time_limit,
            partial(self.handle_round_timeout, session.chat_id, session.round),
        )
        logger.info(
            "Word game round %s started in %s, letter: %s, time: %ss, minLength: %s",
            session.round,
            session.chat_id,
            session.current_letter,
            session.time_limit,
            session.min_word_length,
        )

    def _resolve_locked(self, session: GameSession) -> rules.RoundOutcome:
        outcome = rules.resolve_round(session)
        self._after_settle_locked(session, outcome)
        return outcome

    def _after_settle_locked(self, session: GameSession, outcome: rules.RoundOutcome) -> None:
        chat_id = session.chat_id
        if outcome.game_over:
            self._timers.cancel(chat_id)
            self._registry.remove(chat_id)
            winner = outcome.winner
            logger.info(
                "Word game ended in %s after round %s, winner: %s",
                chat_id,
                outcome.round,
                winner.user_id if winner else None,
            )
            return
        self._timers.schedule(
            chat_id,
            self._settings.next_round_delay,
            partial(self.handle_next_round, chat_id, session.round),
        )
        logger.info(
            "Word game round %s completed in %s, %s players eliminated, %s remaining",
            outcome.round,
            chat_id,
            len(outcome.eliminated),
            len(outcome.remaining),
        )

    async def _announce_outcome(
        self,
        chat_id: ChatId,
        outcome: rules.RoundOutcome,
        *,
        timed_out: bool,
        origin: Any = None,
    ) -> None:
        if outcome.game_over:
            await self._react(origin, messages.REACTION_WIN)
        text = messages.round_resolved(outcome, timed_out=timed_out)
        await self._send(chat_id, text, [*_ids(outcome.eliminated), *_ids(outcome.remaining)])

    async def _display_name(self, user_id: UserId) -> str:
        try:
            name = await self._names.resolve(user_id)
        except Exception:
            logger.warning("Failed to resolve name for %s", user_id, exc_info=True)
            name = None
        if not name or not str(name).strip():
            return f"@{user_id}"
        return str(name).strip()

    async def _send(self, chat_id: ChatId, text: str, mentioned_ids: Iterable[UserId] = ()) -> None:
        try:
            await self._notifier.send_text(chat_id, text, list(mentioned_ids))
        except Exception:
            logger.warning("Failed to send word game message to %s", chat_id, exc_info=True)

    async def _react(self, origin: Any, emoji: str) -> None:
        if origin is None:
            return
        try:
            await self._notifier.send_reaction(origin, emoji)
        except Exception:
            logger.warning("Failed to react with %s", emoji, exc_info=True)


def _ids(players: Iterable[PlayerState]) -> list:
    return [player.user_id for player in players]


__all__ = ["GameEngine", "NameResolver", "Notifier", "SubmissionResult"]
