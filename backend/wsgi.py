try:
    from backend.hintword.server import create_app
except ImportError:  # pragma: no cover
    from hintword.server import create_app

app, socketio = create_app()
