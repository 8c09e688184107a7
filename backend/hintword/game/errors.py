"""Lobby-domain errors.

Every core operation either returns its value or raises one of these. The
Socket.IO dispatcher turns them into a ``lobbyError`` for the requester, so
none of them ever reaches the transport as a crash.
"""

from __future__ import annotations


class LobbyError(Exception):
    """Base class for lobby-domain errors."""

    code = "lobby_error"
    kind = "Error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class LobbyNotFoundError(LobbyError):
    """Raised when a lobby id does not name a live lobby."""

    code = "lobby_not_found"
    kind = "NotFound"


class PlayerNotInLobbyError(LobbyError):
    """Raised when an operation requires existing lobby membership."""

    code = "player_not_in_lobby"
    kind = "NotFound"


class UnauthorizedError(LobbyError):
    """Raised when a non-host attempts a host-only action."""

    code = "only_host"
    kind = "Unauthorized"


class InvalidStateError(LobbyError):
    """Raised when an action is not valid for the current round status."""

    code = "invalid_state"
    kind = "InvalidState"


class GameInProgressError(InvalidStateError):
    code = "game_in_progress"


class LobbyFullError(LobbyError):
    code = "lobby_full"
    kind = "CapacityExceeded"


class ValidationError(LobbyError):
    """Raised for missing or malformed input."""

    code = "invalid_payload"
    kind = "ValidationError"


class LobbyIdsExhaustedError(LobbyError):
    """Raised when no free lobby id turns up within the attempt limit."""

    code = "lobby_ids_exhausted"
    kind = "CapacityExceeded"
