import os
import sys
import pytest

# Ensure the project root (containing the `drawit` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from drawit import create_app, socketio, get_directory
from drawit.services.games import GameDirectory


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['*']
    MAX_TEAMS = 4
    MAX_PLAYERS_PER_TEAM = 6
    MAX_ROUNDS = 10
    ROUND_TIME_LIMIT_SEC = 60


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def directory(flask_app):
    return get_directory(flask_app)


@pytest.fixture()
def service():
    """A standalone, initialized directory with no Flask app around it."""
    svc = GameDirectory()
    svc.initialize()
    yield svc
    svc.reset()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def make_sio_client(flask_app):
    """Factory for extra Socket.IO clients, disconnected on teardown."""
    clients = []

    def _make():
        c = socketio.test_client(flask_app, namespace='/ws')
        clients.append(c)
        return c

    yield _make
    for c in clients:
        try:
            c.disconnect(namespace='/ws')
        except Exception:
            pass
