from flask import Blueprint, current_app, jsonify
from trivia.protocol import normalize_room_code

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the trivia game server!'})

@main.route('/health')
def health():
    services = current_app.extensions['trivia']
    return jsonify({'status': 'ok', 'rooms': len(services.registry)})

@main.route('/api/rooms/<string:room_code>')
def room_state(room_code):
    services = current_app.extensions['trivia']
    with services.registry.lock:
        room = services.registry.get(normalize_room_code(room_code))
        if room is None:
            return jsonify({'error': 'Room not found'}), 404
        return jsonify(room.to_dict())
