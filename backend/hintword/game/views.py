from __future__ import annotations

from dataclasses import asdict

from .models import Lobby, RoundWinner, Settings
from .session import LobbySession


def settings_public_state(settings: Settings) -> dict:
    return {
        "timeLimit": settings.time_limit,
        "hintInterval": settings.hint_interval,
        "maxPlayers": settings.max_players,
    }


def round_winner_public_state(winner: RoundWinner | None) -> dict | None:
    if winner is None:
        return None
    return {
        "id": winner.id,
        "name": winner.name,
        "score": winner.score,
        "roundScore": winner.round_score,
    }


def players_public_state(lobby: Lobby) -> list[dict]:
    return [asdict(p) for p in lobby.players]


def round_public_state(session: LobbySession) -> dict:
    with session.lock:
        lobby = session.lobby
        state = lobby.state
        payload = {
            "lobbyId": lobby.id,
            "status": state.status,
            "round": state.round,
            "hints": list(state.hints),
            "hintIndex": state.hint_index,
            "totalHints": len(state.hint_list),
            "timeLimit": lobby.settings.time_limit,
            "hintInterval": lobby.settings.hint_interval,
            "startTime": int(state.start_time * 1000) if state.start_time is not None else None,
            "timeRemaining": session.time_remaining_sec() if state.round else None,
            "roundWinner": round_winner_public_state(state.round_winner),
            "winner": asdict(state.winner) if state.winner else None,
            "players": players_public_state(lobby),
            "settings": settings_public_state(lobby.settings),
        }

        # The secret stays server-side while it can still be guessed.
        if state.status != "playing" and state.current_word:
            payload["currentWord"] = state.current_word

        return payload


def lobby_public_state(session: LobbySession) -> dict:
    with session.lock:
        lobby = session.lobby
        return {
            "id": lobby.id,
            "hostId": lobby.host_id,
            "players": players_public_state(lobby),
            "settings": settings_public_state(lobby.settings),
            "gameState": round_public_state(session),
        }
