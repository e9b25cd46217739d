import logging
import math

from trivia import protocol
from trivia.models import NO_CORRECT_ROUND, Room
from trivia.transport import RoomEvents
from .registry import RoomRegistry
from .settings import GameSettings
from .timers import TaskRunner, TimerHandle

logger = logging.getLogger(__name__)


class RoundScheduler:
    """Time authority for every room: rounds, countdown ticks and game end.

    Lifecycle per room: lobby -> starting -> round active -> round graded ->
    (next round active | game over).

    - At most one countdown tick is armed per room (``room.timer_handle``);
      arming a new one cancels the old one first.
    - Every delayed callback re-checks that the room is still registered, that
      the game epoch is unchanged and that the round it targets is the live
      one, so timeout and all-answered endings can race without a double end.
    """

    def __init__(self, registry: RoomRegistry, events: RoomEvents, runner: TaskRunner, settings: GameSettings):
        self.registry = registry
        self.events = events
        self.runner = runner
        self.settings = settings

    def _seconds_left(self, room: Room) -> int:
        ms_left = max(0, room.round_deadline - self.runner.now_ms())
        return math.ceil(ms_left / 1000)

    def _is_live(self, room: Room, epoch: int) -> bool:
        return self.registry.is_current(room) and room.epoch == epoch

    def cancel_timer(self, room: Room) -> None:
        handle = room.timer_handle
        room.timer_handle = None
        if handle is not None:
            handle.cancel()
            logger.debug(f"[timer-cancel] room={room.code}")

    def schedule_game_start(self, room: Room) -> None:
        epoch = room.epoch

        def _start():
            with self.registry.lock:
                if not self._is_live(room, epoch) or not room.game_started or room.round_active:
                    logger.info(f"[start-abort] room={room.code} stale game start")
                    return
                self.start_round(room, 0)

        self.runner.call_later(self.settings.game_start_delay_sec, _start, name=f"start:{room.code}")

    def start_round(self, room: Room, index: int) -> None:
        if not self.registry.is_current(room) or not (0 <= index < len(room.questions)):
            return

        now = self.runner.now_ms()
        room.round_index = index
        room.round_active = True
        room.round_start_time = now
        room.round_deadline = now + self.settings.round_duration_ms
        for player in room.players.values():
            if player.last_correct_round is None:
                player.last_correct_round = NO_CORRECT_ROUND
            player.has_answered = False

        logger.info(f"[round-start] room={room.code} index={index} total={len(room.questions)}")
        self.broadcast_round(room)
        self.events.scoreboard(room)
        self._arm_tick(room)

    def broadcast_round(self, room: Room) -> None:
        question = room.current_question
        if question is None:
            return
        self.events.broadcast(room, protocol.ROUND, protocol.round_payload(room, question))
        self.events.broadcast(room, protocol.TIMER, self._seconds_left(room))

    def send_round_to(self, room: Room, connection_id: str) -> None:
        """Catch a joiner up on a running game without touching round state.

        During the start delay the joiner gets ``gameStarting``; between rounds
        it gets the round just graded with 0 seconds left, and the next round
        reaches it through the normal broadcast.
        """
        if not room.game_started:
            return
        question = room.current_question
        if room.round_start_time == 0 or question is None:
            self.events.unicast(connection_id, protocol.GAME_STARTING, {})
            return
        self.events.unicast(connection_id, protocol.ROUND, protocol.round_payload(room, question))
        seconds_left = self._seconds_left(room) if room.round_active else 0
        self.events.unicast(connection_id, protocol.TIMER, seconds_left)

    def _arm_tick(self, room: Room) -> None:
        self.cancel_timer(room)
        handle: TimerHandle

        def _tick():
            with self.registry.lock:
                if room.timer_handle is not handle or not room.round_active:
                    return
                seconds_left = self._seconds_left(room)
                self.events.broadcast(room, protocol.TIMER, seconds_left)
                if seconds_left <= 0:
                    self.end_round(room, reason='timeout')

        handle = self.runner.call_every(self.settings.tick_interval_sec, _tick, name=f"tick:{room.code}")
        room.timer_handle = handle

    def check_all_answered(self, room: Room) -> bool:
        if not room.players:
            return False
        return all(p.has_answered for p in room.players.values())

    def schedule_round_end(self, room: Room, delay: float) -> None:
        epoch = room.epoch
        index = room.round_index

        def _end():
            with self.registry.lock:
                if not self._is_live(room, epoch) or not room.round_active or room.round_index != index:
                    return
                self.end_round(room, reason='all-answered')

        self.runner.call_later(delay, _end, name=f"end:{room.code}:{index}")

    def end_round(self, room: Room, reason: str = 'timeout') -> None:
        if not room.round_active:
            return
        self.cancel_timer(room)
        room.round_active = False
        logger.info(f"[round-end] room={room.code} index={room.round_index} reason={reason}")

        next_index = room.round_index + 1
        if next_index < len(room.questions):
            epoch = room.epoch

            def _next():
                with self.registry.lock:
                    if not self._is_live(room, epoch) or not room.game_started or room.round_active:
                        return
                    self.start_round(room, next_index)

            self.runner.call_later(self.settings.next_round_delay_sec, _next, name=f"next:{room.code}:{next_index}")
            return

        self.finish_game(room)

    def finish_game(self, room: Room) -> None:
        room.game_ended = True
        room.game_started = False
        payload = protocol.game_over_payload(room)
        logger.info(
            f"[game-over] room={room.code} rounds={payload['totalRounds']} "
            f"leader={payload['finalScoreboard'][0]['nickname'] if payload['finalScoreboard'] else None}"
        )
        self.events.broadcast(room, protocol.GAME_OVER, payload)
        self.events.players_state(room)
