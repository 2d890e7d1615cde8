from flask import Blueprint, jsonify, request, current_app
from drawit import get_directory
from drawit.errors import GameError
from drawit.socketio_events import broadcast_game_ended, broadcast_game_updated


games = Blueprint('games', __name__)


def _error(exc: GameError, status=None):
    return jsonify({'error': str(exc)}), status or exc.status_code


def _control(action):
    """Run a state action on the active game and broadcast the new state to everyone."""
    directory = get_directory()
    try:
        with directory.lock:
            game = directory.require_current_game()
            action(game)
    except GameError as exc:
        return _error(exc)
    broadcast_game_updated(game)
    return jsonify(game.to_dict())


@games.route('', methods=['POST'])
def create_game():
    data = request.get_json(silent=True) or {}
    name = data.get('name')
    if not name:
        return jsonify({'error': 'Game name is required'}), 400

    try:
        game = get_directory().create_game(name, data.get('options') or {})
    except GameError as exc:
        return _error(exc, 400)

    current_app.logger.info(f"[create] game={game.id} name={game.name!r} via=http")
    broadcast_game_updated(game)
    return jsonify({'success': True, 'game': game.to_dict()}), 201


@games.route('/current', methods=['GET'])
def get_current_game():
    game = get_directory().get_current_game()
    if game is None:
        return jsonify({'error': 'No active game'}), 404
    return jsonify(game.to_dict())


@games.route('/current', methods=['DELETE'])
def end_current_game():
    try:
        ended = get_directory().end_current_game()
    except GameError as exc:
        return _error(exc, 400)
    payload = ended.to_dict() if ended else None
    if ended:
        broadcast_game_ended(payload)
    return jsonify({'success': True, 'game': payload})


@games.route('/history', methods=['GET'])
def get_history():
    return jsonify(get_directory().get_game_history())


@games.route('/current/teams', methods=['POST'])
def add_team():
    data = request.get_json(silent=True) or {}
    directory = get_directory()
    try:
        team = directory.add_team(data.get('name'), team_id=data.get('id'), color=data.get('color'))
    except GameError as exc:
        return _error(exc)
    broadcast_game_updated(directory.get_current_game())
    return jsonify({'success': True, 'team': team.to_dict()}), 201


@games.route('/current/teams/<string:team_id>', methods=['DELETE'])
def remove_team(team_id):
    directory = get_directory()
    try:
        directory.remove_team(team_id)
    except GameError as exc:
        return _error(exc)
    broadcast_game_updated(directory.get_current_game())
    return jsonify({'success': True})


@games.route('/current/players', methods=['POST'])
def add_player():
    data = request.get_json(silent=True) or {}
    directory = get_directory()
    try:
        player = directory.add_player(data.get('name'), player_id=data.get('id'), team_id=data.get('teamId'))
    except GameError as exc:
        return _error(exc)
    broadcast_game_updated(directory.get_current_game())
    return jsonify({'success': True, 'player': player.to_dict()}), 201


@games.route('/current/players/<string:player_id>', methods=['DELETE'])
def remove_player(player_id):
    directory = get_directory()
    try:
        directory.remove_player(player_id)
    except GameError as exc:
        return _error(exc)
    broadcast_game_updated(directory.get_current_game())
    return jsonify({'success': True})


@games.route('/current/players/<string:player_id>/ready', methods=['POST'])
def set_player_ready(player_id):
    data = request.get_json(silent=True) or {}
    ready = bool(data.get('ready', True))
    directory = get_directory()
    try:
        with directory.lock:
            game = directory.require_current_game()
            player = game.set_player_ready(player_id, ready)
    except GameError as exc:
        return _error(exc)
    broadcast_game_updated(game)
    return jsonify({'success': True, 'player': player.to_dict()})


@games.route('/current/start', methods=['POST'])
def start_game():
    return _control(lambda game: game.start_game())


@games.route('/current/pause', methods=['POST'])
def pause_game():
    return _control(lambda game: game.pause_game())


@games.route('/current/resume', methods=['POST'])
def resume_game():
    return _control(lambda game: game.resume_game())


@games.route('/current/next-round', methods=['POST'])
def next_round():
    return _control(lambda game: game.next_round())


@games.route('/current/word', methods=['POST'])
def set_word():
    data = request.get_json(silent=True) or {}
    directory = get_directory()
    try:
        with directory.lock:
            game = directory.require_current_game()
            game.set_current_word(data.get('word'))
    except GameError as exc:
        return _error(exc)
    broadcast_game_updated(game)
    return jsonify({'success': True})
