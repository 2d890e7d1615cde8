from flask import Flask, current_app, jsonify
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def get_directory(flask_app=None):
    """Return the GameDirectory owned by the given (or current) app."""
    if flask_app is None:
        flask_app = current_app
    return flask_app.extensions['game_directory']


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'
    if allowed_origins == ['*']:
        allowed_origins = '*'
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One directory per app; handlers reach it through get_directory()
    from drawit.services.games import GameDirectory
    directory = GameDirectory(defaults={
        'max_teams': flask_app.config.get('MAX_TEAMS', 4),
        'max_players_per_team': flask_app.config.get('MAX_PLAYERS_PER_TEAM', 6),
        'max_rounds': flask_app.config.get('MAX_ROUNDS', 10),
        'round_time_limit': flask_app.config.get('ROUND_TIME_LIMIT_SEC', 60),
    })
    flask_app.extensions['game_directory'] = directory
    directory.initialize()
    flask_app.logger.info('Game directory initialized')

    # Import and register blueprints here
    from drawit.routes import main
    flask_app.register_blueprint(main)

    from drawit.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    @flask_app.errorhandler(404)
    def not_found(_exc):
        return jsonify({'error': 'Endpoint not found'}), 404

    # Register Socket.IO event handlers
    from drawit.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    return flask_app
