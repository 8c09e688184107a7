from __future__ import annotations

import logging
import sys

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .game.errors import ValidationError
from .game.models import Settings
from .game.registry import LobbyRegistry
from .game.session import validate_settings_patch
from .game.words import RandomWordProvider, WordProvider
from .realtime.gateway import SocketIOGateway
from .realtime.handlers import register_socketio_handlers
from .realtime.timers import RoundTimerCoordinator
from .routes.health import bp as health_bp
from .routes.lobbies import bp as lobbies_bp
from .runtime import EXTENSION_KEY, GameRuntime


def _default_settings(config) -> Settings:
    try:
        values = validate_settings_patch(
            {
                "timeLimit": config.get("DEFAULT_TIME_LIMIT_SEC", 60),
                "hintInterval": config.get("DEFAULT_HINT_INTERVAL_SEC", 15),
                "maxPlayers": config.get("DEFAULT_MAX_PLAYERS", 8),
            }
        )
    except ValidationError as exc:
        raise ValueError(f"invalid lobby defaults: {exc.message}") from None
    return Settings(**values)


def create_app(config_class=Config, word_provider: WordProvider | None = None) -> tuple[Flask, SocketIO]:
    app = Flask(__name__, static_folder=None)
    app.config.from_object(config_class)
    logging.getLogger(__name__.rpartition(".")[0]).setLevel(app.config.get("LOG_LEVEL", "INFO"))

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    async_mode = app.config.get("SOCKETIO_ASYNC_MODE") or ""
    if not async_mode:
        # Default choice:
        # - Windows: threading (eventlet has known compatibility issues on newer Python)
        # - Python >= 3.13: threading (safer default)
        # - Otherwise: eventlet
        if sys.platform.startswith("win") or sys.version_info >= (3, 13):
            async_mode = "threading"
        else:
            async_mode = "eventlet"

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=async_mode,
    )

    registry = LobbyRegistry(
        words=word_provider or RandomWordProvider(),
        default_settings=_default_settings(app.config),
        id_length=int(app.config.get("LOBBY_ID_LENGTH", 6)),
    )
    gateway = SocketIOGateway(socketio)
    timers = RoundTimerCoordinator(
        registry,
        gateway,
        start_task=socketio.start_background_task,
        sleep=socketio.sleep,
        background=bool(app.config.get("ROUND_TIMERS_ENABLED", True)),
    )
    runtime = GameRuntime(registry=registry, timers=timers, gateway=gateway)
    app.extensions[EXTENSION_KEY] = runtime

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(lobbies_bp, url_prefix="/api")

    register_socketio_handlers(socketio, runtime)

    return app, socketio
