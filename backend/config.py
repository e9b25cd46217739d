import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,http://127.0.0.1:3000',
        ).split(',')
        if origin.strip()
    ]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Room limits
    MAX_PLAYERS = int(os.environ.get('MAX_PLAYERS', '10'))
    QUESTIONS_PER_GAME = int(os.environ.get('QUESTIONS_PER_GAME', '10'))
    # Round timers (seconds)
    ROUND_DURATION_SEC = int(os.environ.get('ROUND_DURATION_SEC', '30'))
    TICK_INTERVAL_SEC = float(os.environ.get('TICK_INTERVAL_SEC', '1'))
    NEXT_ROUND_DELAY_SEC = float(os.environ.get('NEXT_ROUND_DELAY_SEC', '1.5'))
    ALL_ANSWERED_DELAY_SEC = float(os.environ.get('ALL_ANSWERED_DELAY_SEC', '1.5'))
    DUPLICATE_ANSWER_DELAY_SEC = float(os.environ.get('DUPLICATE_ANSWER_DELAY_SEC', '1'))
    GAME_START_DELAY_SEC = float(os.environ.get('GAME_START_DELAY_SEC', '2'))
    # Question provider; without a key the built-in question set is used
    OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY')
    OPENAI_MODEL = os.environ.get('OPENAI_MODEL', 'gpt-4o-mini')
    OPENAI_TIMEOUT_SEC = float(os.environ.get('OPENAI_TIMEOUT_SEC', '20'))
    OPENAI_TEMPERATURE = float(os.environ.get('OPENAI_TEMPERATURE', '0.8'))
