import pytest
from passlib.hash import bcrypt

from chattrix import create_app
from chattrix.extensions import db, socketio
from chattrix.models import User

PASSWORD = "secret123"
# Low work factor keeps fixture users cheap; verify() reads rounds from the hash.
_HASH = bcrypt.using(rounds=4).hash(PASSWORD)


@pytest.fixture()
def app():
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "FRONTEND_URL": "*",
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def make_user(app):
    def _make(name: str) -> int:
        with app.app_context():
            user = User()
            user.email = f"{name.lower()}@example.com"
            user.full_name = name
            user.password = _HASH
            user.profile_pic = f"https://cdn.example.com/{name.lower()}.png"
            db.session.add(user)
            db.session.commit()
            return user.user_id
    return _make


@pytest.fixture()
def login(app):
    """Return a logged-in HTTP test client for the given user name."""
    def _login(name: str):
        client = app.test_client()
        resp = client.post("/api/auth/login", json={"email": f"{name.lower()}@example.com", "password": PASSWORD})
        assert resp.status_code == 200, resp.get_json()
        return client
    return _login


@pytest.fixture()
def connect(app):
    clients = []

    def _connect(user_id=None, **kwargs):
        auth = {"userId": user_id} if user_id is not None else None
        client = socketio.test_client(app, auth=auth, **kwargs)
        assert client.is_connected()
        clients.append(client)
        return client

    yield _connect
    for client in clients:
        if client.is_connected():
            client.disconnect()


@pytest.fixture()
def received():
    """Payloads of ``name`` events received so far (drains the client's queue)."""
    def _received(client, name):
        return [evt["args"][0] for evt in client.get_received() if evt["name"] == name]
    return _received
