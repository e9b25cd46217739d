from flask import current_app, request
from flask_socketio import emit
from typing import Callable, Dict
import logging

from trivia import protocol, socketio
from trivia.models import Session
from trivia.services.games import GameError, GameServices

logger = logging.getLogger(__name__)

# Connection id -> session record; removed on disconnect
_sessions: Dict[str, Session] = {}


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _services() -> GameServices:
    return current_app.extensions['trivia']


def _session() -> Session:
    sid = _get_sid()
    session = _sessions.get(sid)
    if session is None:
        session = _sessions[sid] = Session(connection_id=sid)
    return session


def _dispatch(action: Callable[[], None]) -> None:
    """Run a coordinator call, turning player-facing rejections into an error event."""
    try:
        action()
    except GameError as exc:
        logger.info(f"[reject] sid={_get_sid()} event={exc.event} message={exc.message}")
        emit(exc.event, exc.to_dict())


def handle_connect():
    sid = _get_sid()
    _sessions[sid] = Session(connection_id=sid)
    emit(protocol.CONNECTED, {'id': sid})


def handle_disconnect(*args):
    session = _sessions.pop(_get_sid(), None)
    if not session:
        return
    _services().coordinator.leave(session, disconnected=True)


def handle_join(data):
    request_ = protocol.JoinRequest.from_payload(data)
    _dispatch(lambda: _services().coordinator.join(_session(), request_))


def handle_set_theme(data):
    request_ = protocol.ThemeRequest.from_payload(data)
    _dispatch(lambda: _services().coordinator.set_theme(_session(), request_))


def handle_ready(data=None):
    _dispatch(lambda: _services().coordinator.ready(_session()))


def handle_guess(data):
    request_ = protocol.GuessRequest.from_payload(data)
    _dispatch(lambda: _services().coordinator.guess(_session(), request_))


def handle_play_again(data=None):
    _dispatch(lambda: _services().coordinator.play_again(_session()))


def handle_request_state(data=None):
    _dispatch(lambda: _services().coordinator.request_state(_session()))


def handle_leave_room(data=None):
    _dispatch(lambda: _services().coordinator.leave(_session()))


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event(protocol.JOIN, handle_join, namespace=namespace)
    socketio.on_event(protocol.SET_THEME, handle_set_theme, namespace=namespace)
    socketio.on_event(protocol.READY, handle_ready, namespace=namespace)
    socketio.on_event(protocol.GUESS, handle_guess, namespace=namespace)
    socketio.on_event(protocol.PLAY_AGAIN, handle_play_again, namespace=namespace)
    socketio.on_event(protocol.REQUEST_STATE, handle_request_state, namespace=namespace)
    socketio.on_event(protocol.LEAVE_ROOM, handle_leave_room, namespace=namespace)
