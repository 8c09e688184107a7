"""Per-lobby round/game state machine.

``waiting -> playing -> roundEnded -> playing -> ... -> ended``. Every
operation validates before it mutates, so a rejected call leaves the lobby
exactly as it was. Callers hold ``session.lock`` across an operation and the
broadcasts that follow it; the lock is shared with the registry.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from threading import RLock
from typing import Any, Callable

from .errors import (
    GameInProgressError,
    InvalidStateError,
    LobbyFullError,
    PlayerNotInLobbyError,
    UnauthorizedError,
    ValidationError,
)
from .models import (
    HINT_INTERVAL_RANGE,
    MAX_PLAYERS_RANGE,
    MIN_PLAYERS_TO_START,
    TIME_LIMIT_RANGE,
    GameWinner,
    Lobby,
    Player,
    RoundState,
    RoundWinner,
    Settings,
)
from .scoring import score_round
from .words import WordProvider

logger = logging.getLogger(__name__)


# wire name -> (attribute, inclusive range)
SETTINGS_FIELDS: dict[str, tuple[str, tuple[int, int]]] = {
    "timeLimit": ("time_limit", TIME_LIMIT_RANGE),
    "hintInterval": ("hint_interval", HINT_INTERVAL_RANGE),
    "maxPlayers": ("max_players", MAX_PLAYERS_RANGE),
}


def validate_settings_patch(patch: Any) -> dict[str, int]:
    """Return ``{attribute: value}`` for a wire settings patch, or raise."""
    if not isinstance(patch, dict):
        raise ValidationError("Settings must be an object")

    changes: dict[str, int] = {}
    for key, raw in patch.items():
        entry = SETTINGS_FIELDS.get(key)
        if entry is None:
            raise ValidationError(f"Unknown setting: {key}")
        attr, (low, high) = entry

        if isinstance(raw, bool) or (isinstance(raw, float) and not raw.is_integer()):
            raise ValidationError(f"{key} must be a whole number")
        try:
            value = int(raw)
        except (TypeError, ValueError):
            raise ValidationError(f"{key} must be a whole number") from None

        if value < low or value > high:
            raise ValidationError(f"{key} must be between {low} and {high}")
        changes[attr] = value
    return changes


def normalize_guess(raw: Any) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError("Guess is required")
    return raw.strip().casefold()


@dataclass
class GuessOutcome:
    correct: bool
    player_id: str
    player_name: str
    guess: str
    round_score: int = 0
    round_winner: RoundWinner | None = None


class LobbySession:
    def __init__(
        self,
        lobby: Lobby,
        words: WordProvider,
        clock: Callable[[], float] = time.time,
        lock: RLock | None = None,
    ) -> None:
        self.lobby = lobby
        self.lock = lock or RLock()
        self._words = words
        self._clock = clock

    @property
    def id(self) -> str:
        return self.lobby.id

    @property
    def status(self) -> str:
        return self.lobby.state.status

    def is_host(self, player_id: str) -> bool:
        return self.lobby.host_id == player_id

    def _require_host(self, actor_id: str, action: str) -> None:
        if not self.is_host(actor_id):
            raise UnauthorizedError(f"Only the host can {action}")

    # ---- membership ----

    def add_player(self, player_id: str, name: str) -> Player:
        with self.lock:
            if self.status == "playing":
                raise GameInProgressError("Game is already in progress. Cannot join mid-game.")
            if len(self.lobby.players) >= self.lobby.settings.max_players:
                raise LobbyFullError("Lobby is full")

            player = Player(id=player_id, name=name)
            self.lobby.players.append(player)
            return player

    def remove_player(self, player_id: str) -> bool:
        """Remove a member. Returns True if host privilege moved to someone else."""
        with self.lock:
            player = self.lobby.get_player(player_id)
            if player is None:
                raise PlayerNotInLobbyError("Player not in lobby")

            self.lobby.players.remove(player)
            if self.lobby.host_id == player_id and self.lobby.players:
                self.lobby.host_id = self.lobby.players[0].id
                return True
            return False

    # ---- host commands ----

    def update_settings(self, actor_id: str, patch: Any) -> Settings:
        with self.lock:
            self._require_host(actor_id, "update settings")
            if self.status == "playing":
                raise InvalidStateError("Cannot update settings during a round")

            changes = validate_settings_patch(patch)
            for attr, value in changes.items():
                setattr(self.lobby.settings, attr, value)
            return self.lobby.settings

    def start_game(self, actor_id: str) -> RoundState:
        with self.lock:
            self._require_host(actor_id, "start the game")
            if self.status == "playing":
                raise InvalidStateError("Game is already in progress")
            if len(self.lobby.players) < MIN_PLAYERS_TO_START:
                raise InvalidStateError(f"Need at least {MIN_PLAYERS_TO_START} players to start")

            self.lobby.state = self._new_round(1)
            for p in self.lobby.players:
                p.score = 0

            logger.info("[game-started] lobby=%s players=%d", self.id, len(self.lobby.players))
            return self.lobby.state

    def start_next_round(self, actor_id: str) -> RoundState:
        with self.lock:
            self._require_host(actor_id, "start the next round")
            if self.status != "roundEnded":
                raise InvalidStateError("Round is not ended")

            self.lobby.state = self._new_round(self.lobby.state.round + 1)
            logger.info("[round-started] lobby=%s round=%d", self.id, self.lobby.state.round)
            return self.lobby.state

    def end_game(self, actor_id: str | None = None) -> RoundState:
        with self.lock:
            if actor_id is not None:
                self._require_host(actor_id, "end the game")
            state = self.lobby.state
            if state.status == "waiting":
                raise InvalidStateError("Game has not started")

            best: Player | None = None
            for p in self.lobby.players:
                if best is None or p.score > best.score:
                    best = p

            state.winner = GameWinner(id=best.id, name=best.name, score=best.score) if best else None
            state.status = "ended"
            state.time_remaining = 0
            logger.info(
                "[game-ended] lobby=%s winner=%s score=%s",
                self.id,
                best.id if best else None,
                best.score if best else None,
            )
            return state

    # ---- round play ----

    def submit_guess(self, player_id: str, raw_guess: Any) -> GuessOutcome:
        with self.lock:
            state = self.lobby.state
            if state.status != "playing":
                raise InvalidStateError("Game is not in progress")
            player = self.lobby.get_player(player_id)
            if player is None:
                raise PlayerNotInLobbyError("Player not found in lobby")

            guess = normalize_guess(raw_guess)
            shown = raw_guess.strip()
            if guess != (state.current_word or "").strip().casefold():
                return GuessOutcome(correct=False, player_id=player.id, player_name=player.name, guess=shown)

            points = score_round(self.elapsed_sec(), self.lobby.settings.time_limit)
            player.score += points
            state.round_winner = RoundWinner(
                id=player.id,
                name=player.name,
                score=player.score,
                round_score=points,
            )
            logger.info("[correct-guess] lobby=%s round=%d player=%s points=%d", self.id, state.round, player.id, points)
            return GuessOutcome(
                correct=True,
                player_id=player.id,
                player_name=player.name,
                guess=shown,
                round_score=points,
                round_winner=state.round_winner,
            )

    def end_round(self) -> bool:
        """Move a playing round to ``roundEnded``. No-op (False) otherwise."""
        with self.lock:
            state = self.lobby.state
            if state.status != "playing":
                return False
            state.status = "roundEnded"
            state.time_remaining = 0
            logger.info(
                "[round-ended] lobby=%s round=%d winner=%s",
                self.id,
                state.round,
                state.round_winner.id if state.round_winner else None,
            )
            return True

    def reveal_next_hint(self) -> str | None:
        """Append the next hint to the revealed list; None when none remain."""
        with self.lock:
            state = self.lobby.state
            if state.status != "playing" or state.hints_exhausted:
                return None
            hint = state.hint_list[state.hint_index]
            state.hints.append(hint)
            state.hint_index += 1
            return hint

    def elapsed_sec(self) -> float:
        start = self.lobby.state.start_time
        if start is None:
            return 0.0
        return max(0.0, self._clock() - start)

    def time_remaining_sec(self) -> int:
        state = self.lobby.state
        if state.status != "playing":
            return state.time_remaining or 0
        return max(0, int(self.lobby.settings.time_limit - self.elapsed_sec()))

    def _new_round(self, number: int) -> RoundState:
        entry = self._words.draw(exclude=self.lobby.state.current_word)
        return RoundState(
            status="playing",
            round=number,
            current_word=entry.word.strip().upper(),
            hint_list=tuple(entry.hints),
            hints=[],
            hint_index=0,
            start_time=self._clock(),
            time_remaining=self.lobby.settings.time_limit,
        )
