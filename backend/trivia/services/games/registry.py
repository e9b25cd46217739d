"""In-memory room registry and the game error taxonomy."""

import logging
import threading
from typing import Dict, Optional

from trivia.models import Room

logger = logging.getLogger(__name__)


class GameError(Exception):
    """Player-facing rejection; delivered to the requester on ``event``."""

    event = 'error'
    message = 'Terjadi kesalahan'

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self):
        return {'message': self.message}


class RoomFullError(GameError):
    event = 'joinError'
    message = 'Room penuh (maksimal 10 pemain)'


class NotCreatorError(GameError):
    event = 'themeError'
    message = 'Hanya pembuat room yang bisa memilih tema'


class InvalidThemeError(GameError):
    event = 'themeError'
    message = 'Tema tidak valid'


class QuizBusyError(GameError):
    event = 'themeError'
    message = 'Quiz sedang dibuat atau game sedang berjalan'


class QuizNotReadyError(GameError):
    event = 'readyError'
    message = 'Tunggu quiz di-generate terlebih dahulu'


class RoomRegistry:
    """Owns every ``Room`` keyed by its normalized code.

    ``lock`` is re-entrant and serializes all room mutation: socket handlers,
    timer callbacks and quiz-generation callbacks hold it while they run.
    """

    def __init__(self) -> None:
        self._rooms: Dict[str, Room] = {}
        self.lock = threading.RLock()

    def get(self, code: Optional[str]) -> Optional[Room]:
        if not code:
            return None
        return self._rooms.get(code)

    def get_or_create(self, code: str) -> Room:
        with self.lock:
            room = self._rooms.get(code)
            if room is None:
                room = Room(code=code)
                self._rooms[code] = room
                logger.info(f"[room-create] room={code}")
            return room

    def delete(self, code: str) -> None:
        with self.lock:
            room = self._rooms.pop(code, None)
            if room is None:
                return
            if room.timer_handle is not None:
                room.timer_handle.cancel()
                room.timer_handle = None
            # Invalidate any grace-delay callbacks still pointing at this room
            room.epoch += 1
            logger.info(f"[room-delete] room={code}")

    def is_current(self, room: Room) -> bool:
        return self._rooms.get(room.code) is room

    def __len__(self) -> int:
        return len(self._rooms)
