from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from warrior_cup.api.tournaments import tournaments
    flask_app.register_blueprint(tournaments, url_prefix='/api/tournaments')

    from warrior_cup.api.course_search import course_search
    flask_app.register_blueprint(course_search, url_prefix='/api')

    from warrior_cup.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    # Flask-Login principal is rebuilt from the session id, no user table involved
    from warrior_cup.models import Participant

    @login_manager.user_loader
    def load_participant(participant_id):
        return Participant.from_id(participant_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        from flask import jsonify
        return jsonify({'error': 'Join the tournament first'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database with a demo tournament."""
        from warrior_cup.services.tournament.store import create_tournament
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            tournament = create_tournament()
            click.echo('Database has been reset and seeded!')
            click.echo(f"Tournament ID: {tournament['id']}")
            click.echo(f"Player passcode: {tournament['passcode']}")
            click.echo(f"Admin passcode: {tournament['adminPasscode']}")

    flask_app.cli.add_command(db_reset_command)

    return flask_app
