import os
import sys
from collections import defaultdict
import pytest

# Ensure the backend root (containing the `trivia` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from trivia import create_app, socketio
from trivia import socketio_events
from trivia.models import Session
from trivia.protocol import JoinRequest
from trivia.services.games import build_game_services
from trivia.services.games.timers import TaskRunner, TimerHandle
from trivia.services.questions import QuestionService

START_MS = 1_700_000_000_000


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:5173']
    SOCKETIO_NAMESPACE = '/'
    LOG_LEVEL = 'DEBUG'
    OPENAI_API_KEY = None


class ManualTaskRunner(TaskRunner):
    """Deterministic runner: nothing fires until ``advance`` moves the clock."""

    def __init__(self, start_ms=START_MS):
        self.now = start_ms
        self._queue = []
        self._seq = 0

    def now_ms(self):
        return self.now

    def _push(self, due_ms, handle, fn, interval_ms):
        self._seq += 1
        self._queue.append((due_ms, self._seq, handle, fn, interval_ms))

    def call_later(self, delay, fn, name='later'):
        handle = TimerHandle(name)
        self._push(self.now + int(round(delay * 1000)), handle, fn, None)
        return handle

    def call_every(self, interval, fn, name='every'):
        handle = TimerHandle(name)
        interval_ms = int(round(interval * 1000))
        self._push(self.now + interval_ms, handle, fn, interval_ms)
        return handle

    def pending(self, prefix=''):
        return [entry[2] for entry in self._queue if not entry[2].cancelled and entry[2].name.startswith(prefix)]

    def advance(self, seconds):
        target = self.now + int(round(seconds * 1000))
        while True:
            due = [entry for entry in self._queue if entry[0] <= target]
            if not due:
                break
            entry = min(due, key=lambda e: (e[0], e[1]))
            self._queue.remove(entry)
            due_ms, _, handle, fn, interval_ms = entry
            self.now = max(self.now, due_ms)
            if handle.cancelled:
                continue
            if interval_ms is not None:
                self._push(due_ms + interval_ms, handle, fn, interval_ms)
            fn()
        self.now = target

    def run_pending(self):
        self.advance(0)


class RecordingTransport:
    def __init__(self):
        self.sent = []
        self.subscriptions = defaultdict(set)

    def broadcast(self, room_code, event, payload=None):
        self.sent.append(('broadcast', room_code, event, payload))

    def unicast(self, connection_id, event, payload=None):
        self.sent.append(('unicast', connection_id, event, payload))

    def subscribe(self, connection_id, room_code):
        self.subscriptions[room_code].add(connection_id)

    def unsubscribe(self, connection_id, room_code):
        self.subscriptions[room_code].discard(connection_id)

    def payloads(self, event, target=None):
        return [
            payload for _, to, name, payload in self.sent
            if name == event and (target is None or to == target)
        ]

    def clear(self):
        self.sent.clear()


@pytest.fixture()
def runner():
    return ManualTaskRunner()


@pytest.fixture()
def transport():
    return RecordingTransport()


@pytest.fixture()
def services(runner, transport):
    return build_game_services({}, transport=transport, runner=runner, questions=QuestionService())


@pytest.fixture()
def failing_services(runner, transport):
    class FailingQuestionService(QuestionService):
        def generate(self, theme_label):
            raise RuntimeError('provider exploded')

    return build_game_services({}, transport=transport, runner=runner, questions=FailingQuestionService())


@pytest.fixture()
def sessions():
    """Factory keeping one Session per connection id."""
    store = {}

    def _get(cid):
        if cid not in store:
            store[cid] = Session(connection_id=cid)
        return store[cid]

    return _get


@pytest.fixture()
def join_player(services, sessions):
    def _join(cid, nickname, room_code='ABCD'):
        payload = {'nickname': nickname, 'roomCode': room_code}
        return services.coordinator.join(sessions(cid), JoinRequest.from_payload(payload))

    return _join


@pytest.fixture()
def flask_app(runner):
    socketio_events._sessions.clear()
    application = create_app(TestConfig, task_runner=runner, question_service=QuestionService())
    yield application
    socketio_events._sessions.clear()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    clients = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass
