"""Cancellable scheduled tasks.

Rooms never hold raw threads. They hold ``TimerHandle`` objects produced by a
``TaskRunner``; cancelling a handle guarantees its callback will not run
(again). The Socket.IO runner backs tasks with ``socketio.start_background_task``
so they work under threading, eventlet or gevent alike.
"""

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)


class TimerHandle:
    def __init__(self, name: str = 'task'):
        self.name = name
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class TaskRunner:
    """Interface used by the scheduler and coordinator."""

    def now_ms(self) -> int:
        raise NotImplementedError

    def call_later(self, delay: float, fn: Callable[[], None], name: str = 'later') -> TimerHandle:
        raise NotImplementedError

    def call_every(self, interval: float, fn: Callable[[], None], name: str = 'every') -> TimerHandle:
        raise NotImplementedError

    def spawn(self, fn: Callable[[], None], name: str = 'spawn') -> TimerHandle:
        return self.call_later(0, fn, name=name)


class SocketIOTaskRunner(TaskRunner):
    def __init__(self, socketio, app=None):
        self._socketio = socketio
        self._app = app

    def now_ms(self) -> int:
        return int(time.time() * 1000)

    def _run(self, handle: TimerHandle, fn: Callable[[], None]) -> None:
        if handle.cancelled:
            return
        try:
            if self._app is not None:
                with self._app.app_context():
                    fn()
            else:
                fn()
        except Exception:
            # A failing callback must not kill the worker of another room
            logger.exception(f"[timer-error] task={handle.name}")

    def call_later(self, delay, fn, name='later'):
        handle = TimerHandle(name)

        def _worker():
            if delay > 0:
                self._socketio.sleep(delay)
            self._run(handle, fn)

        self._socketio.start_background_task(_worker)
        return handle

    def call_every(self, interval, fn, name='every'):
        handle = TimerHandle(name)

        def _worker():
            while not handle.cancelled:
                self._socketio.sleep(interval)
                self._run(handle, fn)

        self._socketio.start_background_task(_worker)
        return handle
