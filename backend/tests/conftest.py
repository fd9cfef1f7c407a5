import os
import sys
import random
import pytest

# Ensure the backend root (containing the `app` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from app import create_app, socketio, parties
from app.models import CardKind
from app.services.games.cards import card_set_from_dict, load_card_set
from app.services.games.engine import GameEngine


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    ROUND_LENGTH_SEC = 60
    HAND_SIZE = 10
    MIN_PLAYERS = 3
    PARTY_CODE_LENGTH = 5
    TIMER_HEARTBEAT_SEC = 0
    CARD_DECK_PATH = None
    CORS_ORIGINS = ['http://localhost:5173']


class TaskRecorder:
    """Stands in for start_background_task; tasks run only when asked."""

    def __init__(self):
        self.tasks = []

    def __call__(self, target, *args):
        self.tasks.append((target, args))

    def run_all(self):
        tasks, self.tasks = self.tasks, []
        for target, args in tasks:
            target(*args)
        return len(tasks)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def make_card_set(prompts=5, responses=40):
    return card_set_from_dict({
        'prompts': [{'id': f'q{i}', 'text': f'Prompt {i} ____.'} for i in range(prompts)],
        'responses': [{'id': f'a{i}', 'text': f'Response {i}'} for i in range(responses)],
    })


@pytest.fixture()
def tasks():
    return TaskRecorder()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def card_set():
    return load_card_set()


@pytest.fixture()
def make_engine(tasks, clock):
    def _make(card_set=None, **kwargs):
        kwargs.setdefault('round_length', 60)
        kwargs.setdefault('start_background_task', tasks)
        kwargs.setdefault('sleep', lambda seconds: None)
        kwargs.setdefault('clock', clock)
        kwargs.setdefault('rng', random.Random(7))
        return GameEngine('ABCDE', card_set or load_card_set(), **kwargs)
    return _make


@pytest.fixture()
def engine(make_engine):
    return make_engine()


@pytest.fixture()
def events(engine):
    received = []
    engine.events.subscribe(received.append)
    return received


@pytest.fixture()
def three_players(engine):
    for i, name in enumerate(['Yusuf', 'Salman', 'Reza']):
        assert engine.join(name, f's{i}').success
    return engine


def response_locations(engine):
    """Every response card id currently on loan or in the deck, with repeats."""
    ids = list(engine.decks.card_ids(CardKind.RESPONSE))
    for player in engine.players.players():
        ids.extend(c.id for c in player.hand)
    current = engine.latest_round
    if current is not None and current.active:
        ids.extend(s.id for s in current.submissions)
    return ids


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
    parties.clear()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


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
