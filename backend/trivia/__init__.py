from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import logging
import click
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config, task_runner=None, question_service=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    logging.basicConfig(
        level=flask_app.config.get('LOG_LEVEL', 'INFO'),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Game services are bound per app so tests can inject a fake clock and provider
    from trivia.services.games import build_game_services
    from trivia.services.games.timers import SocketIOTaskRunner
    from trivia.services.questions import QuestionService
    from trivia.transport import SocketIOTransport

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    flask_app.extensions['trivia'] = build_game_services(
        flask_app.config,
        transport=SocketIOTransport(socketio, namespace=namespace),
        runner=task_runner or SocketIOTaskRunner(socketio, app=flask_app),
        questions=question_service or QuestionService.from_config(flask_app.config),
    )

    from trivia.routes import main
    flask_app.register_blueprint(main)

    from trivia.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace)

    @click.command('questions-fallback')
    def questions_fallback_command():
        """Prints the built-in question set used when generation fails."""
        questions = flask_app.extensions['trivia'].coordinator.questions.fallback()
        for number, question in enumerate(questions, start=1):
            click.echo(f"{number}. {question.text}")
            for option in question.options:
                marker = '*' if option.label == question.correct_label else ' '
                click.echo(f"   {marker} {option.label}. {option.text}")

    flask_app.cli.add_command(questions_fallback_command)

    return flask_app
