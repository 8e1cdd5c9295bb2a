import logging

from chattrix import create_app


def test_log_level_comes_from_config():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "LOG_LEVEL": "debug",
    })
    assert app.logger is logging.getLogger("chattrix")
    assert logging.getLogger("chattrix.realtime.dispatcher").getEffectiveLevel() == logging.DEBUG


def test_unknown_log_level_falls_back_to_info():
    create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "LOG_LEVEL": "chatty",
    })
    assert logging.getLogger("chattrix").level == logging.INFO


def test_index_names_the_app(app):
    resp = app.test_client().get("/")
    assert resp.status_code == 200
    assert b"Chattrix" in resp.data
