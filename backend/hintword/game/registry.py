"""In-memory lobby registry.

Owns every live lobby and the player -> lobby index. Nothing here survives a
process restart. One RLock guards the registry and is shared with every
session, so commands and timer callbacks for a lobby run one at a time.
"""

from __future__ import annotations

import logging
import random
import string
import time
from threading import RLock
from typing import Any, Callable

from .errors import LobbyIdsExhaustedError, LobbyNotFoundError, PlayerNotInLobbyError, ValidationError
from .models import MAX_NAME_LENGTH, Lobby, Player, Settings
from .session import LobbySession
from .words import RandomWordProvider, WordProvider

logger = logging.getLogger(__name__)

LOBBY_ID_ALPHABET = string.ascii_uppercase + string.digits
MAX_LOBBY_ID_ATTEMPTS = 100


def normalize_player_name(raw: Any) -> str:
    name = raw.strip() if isinstance(raw, str) else ""
    if not name:
        raise ValidationError("Player name is required")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"Player name must be at most {MAX_NAME_LENGTH} characters")
    # Avoid obvious HTML/script injection.
    if "<" in name or ">" in name:
        raise ValidationError("Player name contains invalid characters")
    for ch in name:
        if ord(ch) < 32:
            raise ValidationError("Player name contains invalid characters")
    return name


def normalize_lobby_id(raw: Any) -> str:
    lobby_id = raw.strip().upper() if isinstance(raw, str) else ""
    if not lobby_id:
        raise ValidationError("Lobby id is required")
    return lobby_id


class LobbyRegistry:
    def __init__(
        self,
        words: WordProvider | None = None,
        default_settings: Settings | None = None,
        id_length: int = 6,
        clock: Callable[[], float] = time.time,
        rng: random.Random | None = None,
    ) -> None:
        if id_length < 1:
            raise ValueError("id_length must be >= 1")

        self.lock = RLock()
        self._words = words or RandomWordProvider()
        self._default_settings = default_settings or Settings()
        self._id_length = id_length
        self._clock = clock
        self._rng = rng or random.Random()
        self._sessions: dict[str, LobbySession] = {}
        self._player_lobby: dict[str, str] = {}

    # ---- lookups ----

    def get_session(self, lobby_id: Any) -> LobbySession:
        lobby_id = normalize_lobby_id(lobby_id)
        with self.lock:
            session = self._sessions.get(lobby_id)
            if session is None:
                raise LobbyNotFoundError("Lobby not found")
            return session

    def get_lobby(self, lobby_id: Any) -> Lobby:
        return self.get_session(lobby_id).lobby

    def find_lobby_id(self, player_id: str) -> str | None:
        with self.lock:
            return self._player_lobby.get(player_id)

    def list_lobbies(self) -> list[Lobby]:
        with self.lock:
            return [s.lobby for s in self._sessions.values()]

    def __len__(self) -> int:
        with self.lock:
            return len(self._sessions)

    # ---- lifecycle ----

    def create_lobby(self, host_id: str, host_name: Any) -> Lobby:
        name = normalize_player_name(host_name)
        with self.lock:
            lobby_id = self._generate_lobby_id()
            settings = Settings(
                time_limit=self._default_settings.time_limit,
                hint_interval=self._default_settings.hint_interval,
                max_players=self._default_settings.max_players,
            )
            lobby = Lobby(
                id=lobby_id,
                host_id=host_id,
                players=[Player(id=host_id, name=name)],
                settings=settings,
            )
            self._sessions[lobby_id] = LobbySession(lobby, self._words, clock=self._clock, lock=self.lock)
            self._player_lobby[host_id] = lobby_id
            logger.info("[lobby-created] lobby=%s host=%s", lobby_id, host_id)
            return lobby

    def join_lobby(self, lobby_id: Any, player_id: str, player_name: Any) -> tuple[Lobby, bool]:
        """Returns (lobby, rejoined). A rejoin leaves the lobby untouched."""
        with self.lock:
            session = self.get_session(lobby_id)
            if session.lobby.has_player(player_id):
                logger.info("[lobby-rejoined] lobby=%s player=%s", session.id, player_id)
                return session.lobby, True

            name = normalize_player_name(player_name)
            session.add_player(player_id, name)
            self._player_lobby[player_id] = session.id
            logger.info("[lobby-joined] lobby=%s player=%s", session.id, player_id)
            return session.lobby, False

    def leave_lobby(self, lobby_id: Any, player_id: str) -> Lobby | None:
        """Remove a member. Returns None when the lobby was disbanded."""
        with self.lock:
            session = self.get_session(lobby_id)
            if not session.lobby.has_player(player_id):
                raise PlayerNotInLobbyError("Player not in lobby")

            host_changed = session.remove_player(player_id)
            if self._player_lobby.get(player_id) == session.id:
                del self._player_lobby[player_id]

            if not session.lobby.players:
                del self._sessions[session.id]
                logger.info("[lobby-disbanded] lobby=%s", session.id)
                return None

            logger.info(
                "[lobby-left] lobby=%s player=%s host=%s%s",
                session.id,
                player_id,
                session.lobby.host_id,
                " (transferred)" if host_changed else "",
            )
            return session.lobby

    def handle_disconnect(self, player_id: str) -> tuple[str, Lobby | None] | None:
        """Leave whatever lobby the player is in. Returns (lobby_id, lobby) or None."""
        with self.lock:
            lobby_id = self._player_lobby.get(player_id)
            if lobby_id is None:
                return None
            if lobby_id not in self._sessions:
                del self._player_lobby[player_id]
                return None
            return lobby_id, self.leave_lobby(lobby_id, player_id)

    def _generate_lobby_id(self) -> str:
        for _ in range(MAX_LOBBY_ID_ATTEMPTS):
            code = "".join(self._rng.choices(LOBBY_ID_ALPHABET, k=self._id_length))
            if code not in self._sessions:
                return code
        logger.warning(
            "[lobby-id] no free id after %d attempts (%d live)", MAX_LOBBY_ID_ATTEMPTS, len(self._sessions)
        )
        raise LobbyIdsExhaustedError("No lobby ids available, try again later")
