# run.py
import eventlet
eventlet.monkey_patch()

from chattrix import create_app, socketio

# Logging is configured inside create_app() from LOG_LEVEL.
app = create_app()


if __name__ == "__main__":
    socketio.run(
        app,
        host="0.0.0.0",
        port=app.config["PORT"],
        debug=app.config.get("DEBUG", False),
    )
