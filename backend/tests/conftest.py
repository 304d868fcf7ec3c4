import os
import sys
import pytest

# Ensure the backend root (containing the `partyroom` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from partyroom import create_app, db, socketio
from partyroom import broadcast
from partyroom.content import PuzzleItem, QuizQuestion
from partyroom.directory import create_player, create_room, join_room
from partyroom.services.games import sessions
from partyroom.socketio_events import reset_subscriptions


QUESTIONS = [
    QuizQuestion(question_text=f'Question {i}?', image_url=f'/questions/q{i}.png',
                 answers=('A', 'B', 'C', 'D'), correct_index=i % 4)
    for i in range(5)
]

PUZZLE_ITEMS = [
    PuzzleItem(token=f'ITEM-{i}', hint=f'Hint for item {i}')
    for i in range(4)
]


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = '*'
    LOG_LEVEL = 'DEBUG'
    ROOM_CODE_LENGTH = 5
    QUIZ_INTRO_MS = 0
    QUESTION_LOADING_MS = 0
    QUESTION_SETTLE_MS = 0
    THINK_DURATION_MS = 0
    ANSWER_DURATION_MS = 0
    RESULT_DURATION_MS = 0
    ROOM_RELEASE_GRACE_SEC = 0
    QUIZ_QUESTIONS = QUESTIONS
    PUZZLE_ITEMS = PUZZLE_ITEMS


class LiveConfig(TestConfig):
    """Production code paths: background quiz driver and a short release grace."""
    TESTING = False
    QUIZ_INTRO_MS = 1
    QUESTION_LOADING_MS = 1
    QUESTION_SETTLE_MS = 1
    THINK_DURATION_MS = 1
    ANSWER_DURATION_MS = 1
    RESULT_DURATION_MS = 1
    ROOM_RELEASE_GRACE_SEC = 0.3


def _app_with(config):
    sessions.clear()
    reset_subscriptions()
    application = create_app(config)
    with application.app_context():
        # Ensure models are imported so tables are created
        import partyroom.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()
    sessions.clear()
    reset_subscriptions()


@pytest.fixture()
def flask_app():
    yield from _app_with(TestConfig)


@pytest.fixture()
def live_app():
    yield from _app_with(LiveConfig)


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
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')


@pytest.fixture()
def published(monkeypatch):
    """Record every broadcast as (room_code, event_name, payload) instead of emitting it."""
    events = []

    def _record(room_code, event):
        events.append((room_code, event.name, event.to_dict()))

    monkeypatch.setattr(broadcast, 'publish', _record)
    return events


@pytest.fixture()
def make_room(flask_app):
    """Create a room whose owner is the first name given; returns (room, [players])."""
    def _make(*first_names):
        players = [create_player(name, 'Tester') for name in first_names]
        room = create_room(players[0])
        for player in players[1:]:
            join_room(player, room)
        return room, players
    return _make
