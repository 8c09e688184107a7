from __future__ import annotations

from typing import Any, Protocol

from flask_socketio import SocketIO


class BroadcastGateway(Protocol):
    def to_lobby(self, lobby_id: str, event: str, payload: Any) -> None: ...

    def to_player(self, player_id: str, event: str, payload: Any = None) -> None: ...


class SocketIOGateway:
    """Delivers events through Flask-SocketIO rooms (one room per lobby id).

    Player ids are Socket.IO session ids, and every sid is also its own room.
    """

    def __init__(self, socketio: SocketIO) -> None:
        self._socketio = socketio

    def to_lobby(self, lobby_id: str, event: str, payload: Any) -> None:
        self._socketio.emit(event, payload, to=lobby_id)

    def to_player(self, player_id: str, event: str, payload: Any = None) -> None:
        if payload is None:
            self._socketio.emit(event, to=player_id)
        else:
            self._socketio.emit(event, payload, to=player_id)
