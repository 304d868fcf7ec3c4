from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def _allowed_origins(value):
    origins = [o.strip() for o in (value or '').split(',') if o.strip()]
    if not origins or '*' in origins:
        return '*'
    return origins


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = _allowed_origins(flask_app.config.get('CORS_ORIGINS'))

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from partyroom.content import configure_content
    configure_content(flask_app)

    # Room directory routes live at the root; game controls under /api/games
    from partyroom.main import main
    flask_app.register_blueprint(main)

    from partyroom.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from partyroom.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from partyroom.directory import create_player, create_room, join_room
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            owner = create_player('Ada', 'Lovelace')
            guest = create_player('Alan', 'Turing')
            room = create_room(owner)
            join_room(guest, room)
            print(f'Database has been reset and seeded! Demo room code: {room.code}')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
