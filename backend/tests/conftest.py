import os
import sys
import pytest
from flask import g

# Ensure the backend root (containing the `warrior_cup` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from warrior_cup import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = ['http://localhost:5173']
    LOG_LEVEL = 'DEBUG'
    ANTHROPIC_API_KEY = 'test-key'
    ANTHROPIC_API_URL = 'https://api.anthropic.test/v1/messages'
    ANTHROPIC_MODEL = 'test-model'
    ANTHROPIC_MAX_TOKENS = 4000
    COURSE_SEARCH_TIMEOUT_SEC = 5


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import warrior_cup.models  # noqa: F401
        db.create_all()
        # Test-client requests reuse this app context (and its `g`), so drop
        # Flask-Login's per-request user cache to keep clients isolated.
        @application.before_request
        def _reset_login_cache():
            g.pop('_login_user', None)
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def admin_client(client):
    """Test client holding an admin session for a freshly created tournament."""
    res = client.post('/api/tournaments')
    client.tournament = res.get_json()['tournament']
    return client


@pytest.fixture()
def player_client(flask_app, admin_client):
    """Second test client joined to the admin's tournament with the player passcode."""
    other = flask_app.test_client()
    tournament = admin_client.tournament
    res = other.post('/api/tournaments/join', json={
        'tournament_id': tournament['id'],
        'passcode': tournament['passcode'],
    })
    assert res.status_code == 200
    other.tournament = tournament
    return other


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
