import pytest

from app import create_app, socketio
from config import TestConfig
from models import db


class StrictConfig(TestConfig):
    STRICT_TRANSITIONS = True


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()


@pytest.fixture
def strict_app():
    app = create_app(StrictConfig)
    with app.app_context():
        yield app
        db.session.remove()


@pytest.fixture
def http(app):
    return app.test_client()


@pytest.fixture
def service(app):
    return app.extensions["lifecycle"]


@pytest.fixture
def strict_service(strict_app):
    return strict_app.extensions["lifecycle"]


@pytest.fixture
def sio(app):
    client = socketio.test_client(app)
    client.get_received()
    yield client
    if client.is_connected():
        client.disconnect()


RECIPIENT = {"name": "Jane", "address": "1 Rd"}


@pytest.fixture
def recipient():
    return dict(RECIPIENT)


class FlaskSession:
    """requests.Session stand-in that routes calls into a Flask test client."""

    def __init__(self, test_client, base_url):
        self.test_client = test_client
        self.base_url = base_url
        self.headers = {}
        self.calls = []

    def request(self, method, url, json=None, timeout=None):
        path = url[len(self.base_url):]
        self.calls.append((method, path, json, timeout))
        return FlaskResponse(self.test_client.open(path, method=method, json=json))


class FlaskResponse:
    def __init__(self, response):
        self.status_code = response.status_code
        self._body = response.get_json(silent=True)

    def json(self):
        if self._body is None:
            raise ValueError("no JSON body")
        return self._body


@pytest.fixture
def flask_session(http):
    return FlaskSession(http, "http://engine.test")
