# chattrix/extensions.py
from flask_sqlalchemy import SQLAlchemy
from flask_socketio import SocketIO
from flask_login import LoginManager

from chattrix.realtime.dispatcher import Dispatcher

db = SQLAlchemy()
# SocketIO will be initialized with proper async_mode in create_app()
socketio = SocketIO()
login_manager = LoginManager()
# Process-local relay state; bound to the SocketIO server in create_app()
dispatcher = Dispatcher()
