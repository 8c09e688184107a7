import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Socket.IO async mode (empty = pick per platform)
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Lobby defaults (host may change them per lobby)
    DEFAULT_TIME_LIMIT_SEC = int(os.environ.get("DEFAULT_TIME_LIMIT_SEC", "60"))
    DEFAULT_HINT_INTERVAL_SEC = int(os.environ.get("DEFAULT_HINT_INTERVAL_SEC", "15"))
    DEFAULT_MAX_PLAYERS = int(os.environ.get("DEFAULT_MAX_PLAYERS", "8"))
    LOBBY_ID_LENGTH = int(os.environ.get("LOBBY_ID_LENGTH", "6"))

    # Off in tests: the first hint is still released, no background timers run.
    ROUND_TIMERS_ENABLED = os.environ.get("ROUND_TIMERS_ENABLED", "1") == "1"
