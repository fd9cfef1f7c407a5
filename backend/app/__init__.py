from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config
from app.services.games.parties import PartyManager, party_room

socketio = SocketIO(async_mode=None)
parties = PartyManager()


def broadcast_round_event(event):
    # Runs on request threads and on timer background tasks alike
    socketio.emit('state_update', event.to_dict(), to=party_room(event.party_code), namespace='/ws')


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    parties.init_app(
        flask_app,
        start_background_task=socketio.start_background_task,
        sleep=socketio.sleep,
        broadcast=broadcast_round_event,
    )

    # Import and register blueprints here
    from app.main import main
    flask_app.register_blueprint(main)

    from app.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/parties')

    # Register Socket.IO event handlers
    from app.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('cards-check')
    def cards_check_command():
        """Loads the configured card deck and prints its size."""
        card_set = parties.card_set
        click.echo(f'prompts: {len(card_set.prompts)}')
        click.echo(f'responses: {len(card_set.responses)}')
        hand_size = int(flask_app.config.get('HAND_SIZE', 10))
        click.echo(f'max players: {len(card_set.responses) // hand_size}')

    flask_app.cli.add_command(cards_check_command)

    return flask_app
