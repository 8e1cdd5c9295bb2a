# chattrix/config.py
import os
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


class Config:
    # General environmental details
    APP_NAME = os.environ.get("APP_NAME", "Chattrix")
    SECRET_KEY = os.environ.get("SECRET_KEY", "change_me_in_env")
    # Database
    # Prefer env var, else default to absolute path under ./instance/chattrix.sqlite
    _BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    _DEFAULT_SQLITE_PATH = os.path.join(_BASE_DIR, "instance", "chattrix.sqlite")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URI",
        f"sqlite:///{_DEFAULT_SQLITE_PATH}?timeout=20&check_same_thread=False"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Allowed browser origin for both HTTP (Flask-CORS) and the Socket.IO handshake
    FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:5173")

    # Socket.IO async mode; eventlet in production, threading under tests
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "eventlet")

    # Root log level for the relay (DEBUG shows dropped pushes)
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    DEBUG = os.environ.get("FLASK_DEBUG") == "1"

    try:
        PORT = int(os.environ.get("PORT", "5001"))
    except ValueError:
        PORT = 5001

    # Used when a group is created without an image reference
    DEFAULT_GROUP_IMAGE = os.environ.get(
        "DEFAULT_GROUP_IMAGE",
        "https://img.freepik.com/free-vector/group-young-people-posing-photo_52683-18823.jpg",
    )

    try:
        MAX_TEXT_LENGTH = max(1, int(os.environ.get("MAX_TEXT_LENGTH", "4000")))
    except ValueError:
        MAX_TEXT_LENGTH = 4000
