from dataclasses import dataclass


@dataclass(frozen=True)
class GameSettings:
    max_players: int = 10
    questions_per_game: int = 10
    round_duration_sec: int = 30
    tick_interval_sec: float = 1.0
    next_round_delay_sec: float = 1.5
    all_answered_delay_sec: float = 1.5
    duplicate_answer_delay_sec: float = 1.0
    game_start_delay_sec: float = 2.0

    @classmethod
    def from_config(cls, config) -> 'GameSettings':
        defaults = cls()
        return cls(
            max_players=int(config.get('MAX_PLAYERS', defaults.max_players)),
            questions_per_game=int(config.get('QUESTIONS_PER_GAME', defaults.questions_per_game)),
            round_duration_sec=int(config.get('ROUND_DURATION_SEC', defaults.round_duration_sec)),
            tick_interval_sec=float(config.get('TICK_INTERVAL_SEC', defaults.tick_interval_sec)),
            next_round_delay_sec=float(config.get('NEXT_ROUND_DELAY_SEC', defaults.next_round_delay_sec)),
            all_answered_delay_sec=float(config.get('ALL_ANSWERED_DELAY_SEC', defaults.all_answered_delay_sec)),
            duplicate_answer_delay_sec=float(
                config.get('DUPLICATE_ANSWER_DELAY_SEC', defaults.duplicate_answer_delay_sec)
            ),
            game_start_delay_sec=float(config.get('GAME_START_DELAY_SEC', defaults.game_start_delay_sec)),
        )

    @property
    def round_duration_ms(self) -> int:
        return int(self.round_duration_sec * 1000)
