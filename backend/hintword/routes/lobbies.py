from __future__ import annotations

from flask import Blueprint, jsonify

from ..game.errors import LobbyError
from ..game.views import lobby_public_state
from ..runtime import get_runtime

bp = Blueprint("lobbies", __name__)


@bp.get("/lobbies/<lobby_id>")
def get_lobby(lobby_id: str):
    registry = get_runtime().registry
    try:
        session = registry.get_session(lobby_id)
    except LobbyError:
        return jsonify({"error": "lobby_not_found"}), 404
    return jsonify(lobby_public_state(session))
