from flask import Blueprint, jsonify

from tapclock import registry

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Clock server is running!', 'rooms': len(registry)})


@main.route('/api/rooms/<string:room_id>/state', methods=['GET'])
def get_room_state(room_id):
    """Returns the full clock snapshot of a room."""
    with registry.lock:
        room = registry.get(room_id)
        if not room:
            return jsonify({'error': 'Room not found'}), 404
        return jsonify(room.to_dict())
