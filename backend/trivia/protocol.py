"""Socket event names and payload schemas.

Inbound payloads arrive as whatever JSON the client sent; the ``from_payload``
constructors coerce them into typed requests with normalized defaults so the
coordinator never inspects raw dicts. Outbound builders keep the wire shape in
one place.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from trivia.models import DEFAULT_NICKNAME, DEFAULT_ROOM_CODE, Question, Room

# Inbound
JOIN = 'join'
SET_THEME = 'setTheme'
READY = 'ready'
GUESS = 'guess'
PLAY_AGAIN = 'playAgain'
REQUEST_STATE = 'requestState'
LEAVE_ROOM = 'leaveRoom'

# Outbound
CONNECTED = 'connected'
JOINED = 'joined'
LEFT_ROOM = 'leftRoom'
THEME_SET = 'themeSet'
GENERATING_QUIZ = 'generatingQuiz'
QUIZ_READY = 'quizReady'
GAME_STARTING = 'gameStarting'
ROUND = 'round'
TIMER = 'timer'
GUESS_RESULT = 'guessResult'
SCOREBOARD = 'scoreboard'
PLAYERS_STATE = 'playersState'
GAME_OVER = 'gameOver'


def _text(data: Any, key: str) -> str:
    if not isinstance(data, dict):
        return ''
    value = data.get(key)
    if value is None:
        return ''
    return str(value).strip()


def normalize_nickname(value: Optional[str]) -> str:
    return (value or '').strip() or DEFAULT_NICKNAME


def normalize_room_code(value: Optional[str]) -> str:
    return (value or '').strip().upper() or DEFAULT_ROOM_CODE


@dataclass(frozen=True)
class JoinRequest:
    nickname: str
    room_code: str

    @classmethod
    def from_payload(cls, data):
        return cls(
            nickname=normalize_nickname(_text(data, 'nickname')),
            room_code=normalize_room_code(_text(data, 'roomCode')),
        )


@dataclass(frozen=True)
class ThemeRequest:
    theme: str

    @classmethod
    def from_payload(cls, data):
        return cls(theme=_text(data, 'theme').lower())


@dataclass(frozen=True)
class GuessRequest:
    answer: str

    @classmethod
    def from_payload(cls, data):
        return cls(answer=_text(data, 'answer').upper())


def joined_payload(connection_id: str, room_code: str, is_creator: bool) -> Dict[str, Any]:
    return {'id': connection_id, 'roomCode': room_code, 'isCreator': is_creator}


def round_payload(room: Room, question: Question) -> Dict[str, Any]:
    return {
        'index': room.round_index + 1,
        'total': len(room.questions),
        **question.to_dict(),
    }


def players_state_payload(room: Room, is_creator: bool = False) -> Dict[str, Any]:
    return {
        'players': [p.to_state_dict() for p in room.players.values()],
        'gameStarted': room.game_started,
        'gameEnded': room.game_ended,
        'theme': room.theme_label,
        'quizReady': room.quiz_ready,
        'isCreator': is_creator,
    }


def guess_result_payload(
    correct: bool,
    points: int,
    correct_answer: str,
    already: bool = False,
    elapsed_seconds: Optional[int] = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        'correct': correct,
        'points': points,
        'correctAnswer': correct_answer,
    }
    if already:
        payload['already'] = True
    if elapsed_seconds is not None:
        payload['elapsedSeconds'] = elapsed_seconds
    return payload


def game_over_payload(room: Room) -> Dict[str, Any]:
    return {
        'totalRounds': len(room.questions),
        'finalScoreboard': room.final_ranking(),
    }


def scoreboard_payload(room: Room) -> List[Dict[str, Any]]:
    return room.scoreboard()
