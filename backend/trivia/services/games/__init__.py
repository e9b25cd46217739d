"""Game domain services: scoring, room registry, round timers and sessions.

This package contains the room/round state machine and should be used by
socket handlers and HTTP routes, keeping transport concerns separated from
core game mechanics.
"""

from dataclasses import dataclass

from trivia.services.questions import QuestionService
from trivia.transport import RoomEvents
from .coordinator import SessionCoordinator
from .registry import GameError, RoomRegistry
from .scheduler import RoundScheduler
from .settings import GameSettings
from .timers import TaskRunner


@dataclass
class GameServices:
    registry: RoomRegistry
    events: RoomEvents
    runner: TaskRunner
    scheduler: RoundScheduler
    coordinator: SessionCoordinator
    settings: GameSettings


def build_game_services(config, transport, runner: TaskRunner, questions: QuestionService) -> GameServices:
    settings = GameSettings.from_config(config)
    registry = RoomRegistry()
    events = RoomEvents(transport)
    scheduler = RoundScheduler(registry, events, runner, settings)
    coordinator = SessionCoordinator(registry, scheduler, events, questions, runner, settings)
    return GameServices(registry, events, runner, scheduler, coordinator, settings)


__all__ = ['GameError', 'GameServices', 'build_game_services']
