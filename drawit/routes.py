from flask import Blueprint, current_app, request, jsonify
from drawit import get_directory
from drawit.models import to_iso, utc_now
from drawit.services.games.validation import validate_name, validation_rules

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Draw It Or Lose It game server!'})

@main.route('/api/health')
def health():
    directory = current_app.extensions.get('game_directory')
    return jsonify({
        'status': 'healthy',
        'timestamp': to_iso(utc_now()),
        'gameService': 'initialized' if directory and directory.initialized else 'not initialized',
    })

@main.route('/api/stats')
def stats():
    directory = current_app.extensions.get('game_directory')
    if not directory or not directory.initialized:
        return jsonify({'error': 'Game service not initialized'}), 500
    return jsonify(directory.get_statistics())

@main.route('/api/validate/name', methods=['POST'])
def validate_name_route():
    data = request.get_json(silent=True) or {}
    name = data.get('name')
    if not name:
        return jsonify({'error': 'Name is required'}), 400

    entity_type = data.get('type') or 'entity'
    return jsonify({
        'isUnique': get_directory().is_name_unique(name),
        'validation': validate_name(name, entity_type),
    })

@main.route('/api/validate/rules')
def rules():
    return jsonify(validation_rules())
