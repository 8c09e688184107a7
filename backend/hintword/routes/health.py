from __future__ import annotations

from flask import Blueprint, jsonify

from ..runtime import get_runtime

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    return jsonify({"status": "ok", "lobbies": len(get_runtime().registry)})
