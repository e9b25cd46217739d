import logging
from typing import Optional, Tuple

from trivia import protocol
from trivia.models import NO_CORRECT_ROUND, Player, Room, Session
from trivia.services.questions import QuestionService, theme_label
from trivia.transport import RoomEvents
from .registry import (
    InvalidThemeError,
    NotCreatorError,
    QuizBusyError,
    QuizNotReadyError,
    RoomFullError,
    RoomRegistry,
)
from .scheduler import RoundScheduler
from .scoring import elapsed_seconds, points_for
from .settings import GameSettings
from .timers import TaskRunner

logger = logging.getLogger(__name__)


class SessionCoordinator:
    """Handles one inbound event for one connection at a time.

    Every handler takes the caller's ``Session`` and holds the registry lock
    for its whole mutation. Player-facing rejections are raised as
    ``GameError`` subclasses before anything is changed; events for a room or
    player that no longer exists are ignored.
    """

    def __init__(
        self,
        registry: RoomRegistry,
        scheduler: RoundScheduler,
        events: RoomEvents,
        questions: QuestionService,
        runner: TaskRunner,
        settings: GameSettings,
    ):
        self.registry = registry
        self.scheduler = scheduler
        self.events = events
        self.questions = questions
        self.runner = runner
        self.settings = settings

    def _lookup(self, session: Session) -> Tuple[Optional[Room], Optional[Player]]:
        room = self.registry.get(session.room_code)
        if room is None:
            return None, None
        return room, room.players.get(session.connection_id)

    def join(self, session: Session, request: protocol.JoinRequest) -> Room:
        cid = session.connection_id
        code = request.room_code
        with self.registry.lock:
            existing = self.registry.get(code)
            rejoining = existing is not None and cid in existing.players
            if existing is not None and not rejoining and len(existing.players) >= self.settings.max_players:
                logger.info(f"[join-reject] room={code} sid={cid} reason=full")
                raise RoomFullError(f"Room penuh (maksimal {self.settings.max_players} pemain)")

            if session.room_code and session.room_code != code:
                self.leave(session)

            room = self.registry.get_or_create(code)
            if room.creator_id is None:
                room.creator_id = cid
            if rejoining:
                room.players[cid].nickname = request.nickname
            else:
                room.players[cid] = Player(id=cid, nickname=request.nickname)
            session.room_code = code
            self.events.transport.subscribe(cid, code)
            logger.info(f"[join] room={code} sid={cid} nickname={request.nickname} players={len(room.players)}")

            self.events.unicast(cid, protocol.JOINED, protocol.joined_payload(cid, code, cid == room.creator_id))
            if room.game_started:
                self.scheduler.send_round_to(room, cid)
            self.events.room_state(room)
            return room

    def set_theme(self, session: Session, request: protocol.ThemeRequest) -> None:
        with self.registry.lock:
            room, player = self._lookup(session)
            if room is None or player is None:
                return
            if session.connection_id != room.creator_id:
                raise NotCreatorError()
            label = theme_label(request.theme)
            if label is None:
                raise InvalidThemeError()
            if room.generating:
                raise QuizBusyError('Quiz sedang dibuat, tunggu sebentar')
            if room.game_started:
                raise QuizBusyError('Game sedang berjalan')

            room.theme = request.theme
            room.theme_label = label
            room.questions = []
            room.quiz_ready = False
            room.generating = True
            for p in room.players.values():
                p.ready = False
            theme, epoch = room.theme, room.epoch
            logger.info(f"[theme] room={room.code} theme={theme}")

            self.events.broadcast(room, protocol.THEME_SET, {'theme': label})
            self.events.broadcast(room, protocol.GENERATING_QUIZ, {})
            self.events.players_state(room)

        # The provider call runs outside the lock; other rooms and handlers proceed
        self.runner.spawn(lambda: self._generate(room, epoch, theme, label), name=f"quiz:{room.code}")

    def _generate(self, room: Room, epoch: int, theme: str, label: str) -> None:
        try:
            questions = list(self.questions.generate(label))
        except Exception:
            logger.exception(f"[quiz-fallback] room={room.code} theme={theme} reason=generator_error")
            questions = self.questions.fallback()
        if len(questions) != self.settings.questions_per_game:
            logger.warning(f"[quiz-fallback] room={room.code} theme={theme} reason=count={len(questions)}")
            questions = self.questions.fallback()

        with self.registry.lock:
            if not self.registry.is_current(room) or room.epoch != epoch or room.theme != theme:
                logger.info(f"[quiz-discard] room={room.code} theme={theme} stale result")
                return
            room.questions = questions
            room.quiz_ready = True
            room.generating = False
            logger.info(f"[quiz-ready] room={room.code} theme={theme} questions={len(questions)}")
            self.events.broadcast(room, protocol.QUIZ_READY, {})
            self.events.players_state(room)

    def ready(self, session: Session) -> None:
        with self.registry.lock:
            room, player = self._lookup(session)
            if room is None or player is None:
                return
            if not room.quiz_ready:
                raise QuizNotReadyError()

            player.ready = not player.ready
            self.events.players_state(room)

            # Any toggle may be the one that completes the all-ready condition
            if not room.game_started and room.quiz_ready and all(p.ready for p in room.players.values()):
                self._start_game(room)

    def _start_game(self, room: Room) -> None:
        room.game_started = True
        room.game_ended = False
        room.epoch += 1
        room.round_index = 0
        room.round_start_time = 0
        room.round_deadline = 0
        for p in room.players.values():
            p.ready = False
            p.has_answered = False
            p.last_correct_round = NO_CORRECT_ROUND
        logger.info(f"[game-start] room={room.code} players={len(room.players)}")
        self.events.players_state(room)
        self.events.broadcast(room, protocol.GAME_STARTING, {})
        self.scheduler.schedule_game_start(room)

    def guess(self, session: Session, request: protocol.GuessRequest) -> None:
        with self.registry.lock:
            room, player = self._lookup(session)
            if room is None or player is None or not room.round_active:
                return
            question = room.current_question
            if question is None:
                return

            player.has_answered = True
            if player.last_correct_round == room.round_index:
                self.events.unicast(
                    player.id,
                    protocol.GUESS_RESULT,
                    protocol.guess_result_payload(True, 0, question.correct_label, already=True),
                )
                if self.scheduler.check_all_answered(room):
                    self.scheduler.schedule_round_end(room, self.settings.duplicate_answer_delay_sec)
                return

            if request.answer == question.correct_label:
                elapsed = elapsed_seconds(room.round_start_time, self.runner.now_ms())
                points = points_for(elapsed)
                player.score += points
                player.last_correct_round = room.round_index
                logger.info(
                    f"[guess] room={room.code} sid={player.id} round={room.round_index} "
                    f"correct=True elapsed={elapsed}s points={points}"
                )
                self.events.unicast(
                    player.id,
                    protocol.GUESS_RESULT,
                    protocol.guess_result_payload(True, points, question.correct_label, elapsed_seconds=elapsed),
                )
                self.events.scoreboard(room)
            else:
                self.events.unicast(
                    player.id,
                    protocol.GUESS_RESULT,
                    protocol.guess_result_payload(False, 0, question.correct_label),
                )

            if self.scheduler.check_all_answered(room):
                self.scheduler.schedule_round_end(room, self.settings.all_answered_delay_sec)

    def play_again(self, session: Session) -> None:
        with self.registry.lock:
            room, player = self._lookup(session)
            if room is None or player is None:
                return
            self.scheduler.cancel_timer(room)
            room.epoch += 1
            room.round_index = 0
            room.round_active = False
            room.round_start_time = 0
            room.round_deadline = 0
            room.game_started = False
            room.game_ended = False
            room.theme = None
            room.theme_label = None
            room.questions = []
            room.quiz_ready = False
            room.generating = False
            for p in room.players.values():
                p.score = 0
                p.last_correct_round = NO_CORRECT_ROUND
                p.ready = False
                p.has_answered = False
            logger.info(f"[play-again] room={room.code} sid={session.connection_id}")
            self.events.room_state(room)

    def request_state(self, session: Session) -> None:
        with self.registry.lock:
            room, _ = self._lookup(session)
            if room is None:
                return
            self.events.room_state(room)

    def leave(self, session: Session, disconnected: bool = False) -> None:
        cid = session.connection_id
        with self.registry.lock:
            code = session.room_code
            session.room_code = None
            room = self.registry.get(code)
            if room is None:
                return
            room.players.pop(cid, None)
            if not disconnected:
                self.events.transport.unsubscribe(cid, code)
                self.events.unicast(cid, protocol.LEFT_ROOM, {'roomCode': code})
            logger.info(f"[leave] room={code} sid={cid} remaining={len(room.players)}")

            if not room.players:
                self.registry.delete(code)
                return

            self.events.room_state(room)
            # The leaver may have been the last one the round was waiting on
            if room.round_active and self.scheduler.check_all_answered(room):
                self.scheduler.schedule_round_end(room, self.settings.all_answered_delay_sec)
