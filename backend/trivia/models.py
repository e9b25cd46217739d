from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

OPTION_LABELS = ('A', 'B', 'C', 'D')
NO_CORRECT_ROUND = -1
DEFAULT_NICKNAME = 'Pemain'
DEFAULT_ROOM_CODE = 'DEFAULT'


@dataclass(frozen=True)
class Option:
    label: str
    text: str

    def to_dict(self):
        return {'label': self.label, 'text': self.text}


@dataclass(frozen=True)
class Question:
    """One multiple-choice question; immutable once generated."""

    text: str
    options: Tuple[Option, ...]
    correct_label: str

    def to_dict(self):
        # The correct label is never part of the public round payload
        return {
            'question': self.text,
            'options': [o.to_dict() for o in self.options],
        }


@dataclass
class Player:
    id: str
    nickname: str
    score: int = 0
    last_correct_round: int = NO_CORRECT_ROUND
    ready: bool = False
    has_answered: bool = False

    def to_score_dict(self):
        return {'id': self.id, 'nickname': self.nickname, 'score': self.score}

    def to_state_dict(self):
        return {'id': self.id, 'nickname': self.nickname, 'ready': self.ready}


@dataclass
class Room:
    """Authoritative in-memory state for one room code.

    Both ``game_started`` and ``game_ended`` false means the room is in the
    lobby. ``epoch`` changes whenever a game starts or the room is reset, so
    delayed callbacks armed for an older game can detect they are stale.
    """

    code: str
    players: Dict[str, Player] = field(default_factory=dict)
    round_index: int = 0
    round_active: bool = False
    round_start_time: int = 0
    round_deadline: int = 0
    game_started: bool = False
    game_ended: bool = False
    theme: Optional[str] = None
    theme_label: Optional[str] = None
    questions: List[Question] = field(default_factory=list)
    quiz_ready: bool = False
    generating: bool = False
    creator_id: Optional[str] = None
    timer_handle: Any = None
    epoch: int = 0

    @property
    def current_question(self) -> Optional[Question]:
        if 0 <= self.round_index < len(self.questions):
            return self.questions[self.round_index]
        return None

    def scoreboard(self):
        return [p.to_score_dict() for p in self.players.values()]

    def final_ranking(self):
        # sorted() is stable, so equal score and nickname keep join order
        ranked = sorted(self.players.values(), key=lambda p: (-p.score, p.nickname))
        return [p.to_score_dict() for p in ranked]

    def to_dict(self):
        return {
            'code': self.code,
            'players': [
                {**p.to_state_dict(), 'score': p.score} for p in self.players.values()
            ],
            'creator_id': self.creator_id,
            'theme': self.theme,
            'theme_label': self.theme_label,
            'quiz_ready': self.quiz_ready,
            'generating': self.generating,
            'game_started': self.game_started,
            'game_ended': self.game_ended,
            'round_active': self.round_active,
            'round_index': self.round_index,
            'total_rounds': len(self.questions),
        }


@dataclass
class Session:
    """Per-connection record: which room (if any) this socket belongs to."""

    connection_id: str
    room_code: Optional[str] = None
