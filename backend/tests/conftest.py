import os
import sys
import pytest
import requests

# Ensure the backend root (containing the `putt_trainer` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from putt_trainer import create_app, db
from putt_trainer.services.practice.positions import PuttResult


class TestConfig:
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = ['http://localhost:5173']
    HISTORY_DEFAULT_LIMIT = 50


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import putt_trainer.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def store(flask_app):
    from putt_trainer.store import SessionStore
    return SessionStore()


class Clock:
    """Deterministic millisecond clock; each reading advances by ``step``."""

    def __init__(self, start=1_700_000_000_000, step=1000):
        self.now = start
        self.step = step

    def __call__(self):
        self.now += self.step
        return self.now


@pytest.fixture()
def clock():
    return Clock()


class FlaskResponse:
    def __init__(self, response):
        self._response = response
        self.status_code = response.status_code

    def json(self):
        return self._response.get_json()

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f'{self.status_code} error', response=None)


class FlaskTransport:
    """Routes requests.Session-style calls into the Flask test client."""

    def __init__(self, test_client):
        self.test_client = test_client
        self.calls = []

    def request(self, method, url, timeout=None, json=None, params=None):
        path = url.split('://', 1)[-1]
        path = path[path.index('/'):] if '/' in path else '/'
        self.calls.append((method, path))
        return FlaskResponse(self.test_client.open(path, method=method, json=json, query_string=params))


class DownTransport:
    def request(self, method, url, **kwargs):
        raise requests.ConnectionError(f'{method} {url}: connection refused')


@pytest.fixture()
def transport(client):
    return FlaskTransport(client)


class MemoryStorage:
    """In-memory storage collaborator with switchable failures."""

    def __init__(self):
        self.current = None
        self.archived = []
        self.saved = []
        self.cleared = []
        self.fail_archive = False
        self.fail_save = False

    def save(self, session):
        if self.fail_save:
            raise RuntimeError('backend unreachable')
        self.saved.append(session.session_id)
        self.current = session

    def load_current(self):
        return self.current

    def clear_current(self, session_id):
        self.cleared.append(session_id)
        if self.current is not None and self.current.session_id == session_id:
            self.current = None

    def archive(self, session):
        if self.fail_archive:
            raise RuntimeError('archive rejected')
        self.archived.append(session)

    def history(self, limit=50):
        return list(reversed(self.archived))[:limit]

    def delete_oldest(self, count):
        del self.archived[:count]


@pytest.fixture()
def memory_storage():
    return MemoryStorage()


SINK = PuttResult.SINK
MISS = PuttResult.MISS


def play(engine, *results):
    return [engine.record_putt(r) for r in results]


def clear_position(engine):
    """Finish the current position with three straight sinks."""
    return play(engine, SINK, SINK, SINK)[-1]
