# chattrix/__init__.py
import logging
import os
from typing import Any, Dict, Optional

from flask import Flask, jsonify
from flask_cors import CORS
from .config import Config
from .errors import RelayError
from .extensions import db, socketio, login_manager, dispatcher


"""
Note on import ordering:
Socket.IO handlers are registered by importing ``realtime.gateway`` BEFORE
``socketio.init_app``. Flask-SocketIO replays handlers collected before the
first init onto every new server, so later apps (tests) get them too.
Blueprints are imported inside create_app() to avoid cycles with models.
"""


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(filename)s:%(lineno)d - %(message)s"


def _configure_logging(app: Flask) -> None:
    level = logging.getLevelName(str(app.config.get("LOG_LEVEL") or "INFO").upper())
    if not isinstance(level, int):
        level = logging.INFO
    # No-op when the root logger is already configured (gunicorn, pytest).
    logging.basicConfig(format=LOG_FORMAT, level=level)
    # app.logger is the "chattrix" logger; module loggers inherit its level
    logging.getLogger("chattrix").setLevel(level)


def create_app(test_config: Optional[Dict[str, Any]] = None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)
    _configure_logging(app)

    # Ensure instance folder exists
    try:
        os.makedirs(app.instance_path)
    except OSError:
        pass

    origin = app.config.get("FRONTEND_URL") or "*"
    CORS(app, resources={r"/api/*": {"origins": origin}}, supports_credentials=True)

    # Initialize Application Extensions
    db.init_app(app)
    login_manager.init_app(app)

    from .realtime import gateway  # noqa: F401  # registers socket events
    # eventlet in production; tests run the threading server with inline handlers
    async_mode: str = app.config.get("SOCKETIO_ASYNC_MODE") or "eventlet"
    if app.config.get("TESTING"):
        async_mode = "threading"
    socketio_kwargs: Dict[str, Any] = {"cors_allowed_origins": origin, "async_mode": async_mode}
    if async_mode == "threading":
        socketio_kwargs["async_handlers"] = False
    socketio.init_app(app, **socketio_kwargs)

    from .services.serializers import hydrate_message
    dispatcher.init_app(app, socketio, hydrate=hydrate_message)

    # --- Flask-Login Configuration ---
    from .models import User

    @login_manager.user_loader
    def load_user(user_id):
        try:
            return db.session.get(User, int(user_id))
        except (TypeError, ValueError):
            return None

    @login_manager.unauthorized_handler
    def _unauthorized():
        return jsonify({"error": "Unauthorized - No session"}), 401
    # --------------------------------

    @app.errorhandler(RelayError)
    def _handle_relay_error(exc: RelayError):
        if exc.status_code >= 500:
            app.logger.error("Relay error: %s", exc.message)
        return jsonify(exc.to_payload()), exc.status_code

    # Register App Blueprints (import lazily to avoid cycles)
    from .routes.auth import auth_bp
    from .routes.messages import messages_bp
    from .routes.groups import groups_bp

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(messages_bp, url_prefix="/api/messages")
    app.register_blueprint(groups_bp, url_prefix="/api/groups")

    @app.get("/")
    def index():
        return f"Welcome to {app.config.get('APP_NAME', 'Chattrix')} backend"

    @app.get("/api/presence")
    def presence():
        return jsonify({"online": dispatcher.online_users()})

    with app.app_context():
        # Create database tables if they don't exist.
        db.create_all()

    return app
