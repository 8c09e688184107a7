from __future__ import annotations

import logging
from typing import Any

from flask import request
from flask_socketio import SocketIO, join_room, leave_room

from ..game.errors import LobbyError
from ..game.models import Lobby
from ..game.registry import normalize_lobby_id, normalize_player_name
from ..game.views import lobby_public_state, round_public_state, round_winner_public_state
from ..runtime import GameRuntime
from . import events

logger = logging.getLogger(__name__)


def _payload(data: Any) -> dict:
    return data if isinstance(data, dict) else {}


def register_socketio_handlers(socketio: SocketIO, runtime: GameRuntime) -> None:
    registry = runtime.registry
    timers = runtime.timers
    gateway = runtime.gateway

    def _reject(exc: LobbyError) -> dict:
        logger.debug("[rejected] sid=%s code=%s message=%s", request.sid, exc.code, exc.message)
        gateway.to_player(
            request.sid,
            events.LOBBY_ERROR,
            {"message": exc.message, "code": exc.code, "kind": exc.kind},
        )
        return {"ok": False, "error": exc.code}

    def _broadcast_lobby(lobby_id: str) -> None:
        session = registry.get_session(lobby_id)
        gateway.to_lobby(session.id, events.LOBBY_UPDATED, lobby_public_state(session))

    def _after_leave(lobby_id: str, lobby: Lobby | None) -> None:
        if lobby is None:
            # Disbanded: nobody left to hear from its timers.
            timers.disarm(lobby_id)
            return
        _broadcast_lobby(lobby_id)

    def _leave_previous(player_id: str, previous: str | None, keep: str) -> None:
        if not previous or previous == keep:
            return
        leave_room(previous)
        _after_leave(previous, registry.leave_lobby(previous, player_id))

    @socketio.on(events.CREATE_LOBBY)
    def create_lobby(data):
        payload = _payload(data)
        sid = request.sid
        try:
            with registry.lock:
                name = normalize_player_name(payload.get("playerName"))
                previous = registry.find_lobby_id(sid)
                lobby = registry.create_lobby(sid, name)
                _leave_previous(sid, previous, keep=lobby.id)

                join_room(lobby.id)
                snapshot = lobby_public_state(registry.get_session(lobby.id))
                gateway.to_player(sid, events.LOBBY_CREATED, snapshot)
                gateway.to_player(sid, events.LOBBY_JOINED, snapshot)
        except LobbyError as exc:
            return _reject(exc)
        return {"ok": True, "lobbyId": lobby.id}

    @socketio.on(events.JOIN_LOBBY)
    def join_lobby(data):
        payload = _payload(data)
        sid = request.sid
        try:
            with registry.lock:
                lobby_id = normalize_lobby_id(payload.get("lobbyId"))
                previous = registry.find_lobby_id(sid)
                lobby, rejoined = registry.join_lobby(lobby_id, sid, payload.get("playerName"))
                _leave_previous(sid, previous, keep=lobby.id)

                join_room(lobby.id)
                session = registry.get_session(lobby.id)
                gateway.to_player(sid, events.LOBBY_JOINED, lobby_public_state(session))
                # A rejoin only reattaches this connection; nobody else needs telling.
                if not rejoined:
                    _broadcast_lobby(lobby.id)
        except LobbyError as exc:
            return _reject(exc)
        return {"ok": True, "lobbyId": lobby.id, "rejoined": rejoined}

    @socketio.on(events.UPDATE_LOBBY_SETTINGS)
    def update_lobby_settings(data):
        payload = _payload(data)
        try:
            with registry.lock:
                session = registry.get_session(payload.get("lobbyId"))
                session.update_settings(request.sid, payload.get("settings"))
                _broadcast_lobby(session.id)
        except LobbyError as exc:
            return _reject(exc)
        return {"ok": True}

    @socketio.on(events.START_GAME)
    def start_game(data):
        payload = _payload(data)
        try:
            with registry.lock:
                session = registry.get_session(payload.get("lobbyId"))
                session.start_game(request.sid)
                gateway.to_lobby(session.id, events.GAME_STARTED, round_public_state(session))
                timers.arm(session.id)
        except LobbyError as exc:
            return _reject(exc)
        return {"ok": True}

    @socketio.on(events.START_NEXT_ROUND)
    def start_next_round(data):
        payload = _payload(data)
        try:
            with registry.lock:
                session = registry.get_session(payload.get("lobbyId"))
                state = session.start_next_round(request.sid)
                gateway.to_lobby(session.id, events.GAME_STARTED, round_public_state(session))
                timers.arm(session.id)
        except LobbyError as exc:
            return _reject(exc)
        return {"ok": True, "round": state.round}

    @socketio.on(events.SUBMIT_GUESS)
    def submit_guess(data):
        payload = _payload(data)
        try:
            with registry.lock:
                session = registry.get_session(payload.get("lobbyId"))
                outcome = session.submit_guess(request.sid, payload.get("guess"))
                if outcome.correct:
                    timers.disarm(session.id)

                gateway.to_lobby(
                    session.id,
                    events.PLAYER_GUESS,
                    {
                        "playerId": outcome.player_id,
                        "playerName": outcome.player_name,
                        "guess": outcome.guess,
                        "correct": outcome.correct,
                    },
                )

                if not outcome.correct:
                    gateway.to_player(
                        request.sid,
                        events.INCORRECT_GUESS,
                        {"message": "Incorrect guess!", "guess": outcome.guess},
                    )
                    return {"ok": True, "correct": False}

                gateway.to_lobby(
                    session.id,
                    events.CORRECT_GUESS,
                    {
                        "playerId": outcome.player_id,
                        "playerName": outcome.player_name,
                        "guess": outcome.guess,
                        "roundScore": outcome.round_score,
                        "roundWinner": round_winner_public_state(outcome.round_winner),
                    },
                )
                timers.finish_round(session)
        except LobbyError as exc:
            return _reject(exc)
        return {"ok": True, "correct": True, "roundScore": outcome.round_score}

    @socketio.on(events.END_GAME)
    def end_game(data):
        payload = _payload(data)
        try:
            with registry.lock:
                session = registry.get_session(payload.get("lobbyId"))
                session.end_game(request.sid)
                timers.disarm(session.id)
                gateway.to_lobby(session.id, events.GAME_ENDED, round_public_state(session))
        except LobbyError as exc:
            return _reject(exc)
        return {"ok": True}

    @socketio.on(events.LEAVE_LOBBY)
    def leave_lobby(data):
        payload = _payload(data)
        sid = request.sid
        try:
            with registry.lock:
                session = registry.get_session(payload.get("lobbyId"))
                lobby_id = session.id
                lobby = registry.leave_lobby(lobby_id, sid)
                leave_room(lobby_id)
                _after_leave(lobby_id, lobby)
        except LobbyError as exc:
            return _reject(exc)
        gateway.to_player(sid, events.LOBBY_LEFT, {"lobbyId": lobby_id})
        return {"ok": True}

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        # A dropped connection is an ordinary leave.
        with registry.lock:
            result = registry.handle_disconnect(request.sid)
            if result is None:
                return
            lobby_id, lobby = result
            _after_leave(lobby_id, lobby)
