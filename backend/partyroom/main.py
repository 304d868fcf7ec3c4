from flask import Blueprint, request, jsonify
from .models import Player, Room
from .directory import create_player, create_room, join_room, list_members, normalize_code

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Backend OK'})


@main.route('/api/player', methods=['POST'])
def register_player():
    data = request.get_json(silent=True) or {}
    first_name = (data.get('firstName') or '').strip()
    last_name = (data.get('lastName') or '').strip()
    if not all([first_name, last_name]):
        return jsonify({'error': 'First name and last name are required'}), 400

    player = create_player(first_name, last_name)
    return jsonify(player.to_dict()), 201


@main.route('/api/room/create', methods=['POST'])
def create_room_route():
    data = request.get_json(silent=True) or {}
    player_id = data.get('playerId')
    if not player_id:
        return jsonify({'error': 'playerId is required'}), 400

    owner = Player.query.filter_by(id=player_id).first_or_404()
    room = create_room(owner)
    return jsonify(room.to_dict()), 201


@main.route('/api/room/join', methods=['POST'])
def join_room_route():
    data = request.get_json(silent=True) or {}
    player_id = data.get('playerId')
    code = data.get('code')
    if not all([player_id, code]):
        return jsonify({'error': 'playerId and code are required'}), 400

    room = Room.query.filter_by(code=normalize_code(code)).first()
    if not room:
        return jsonify({'error': 'Room not found'}), 404
    player = Player.query.filter_by(id=player_id).first_or_404()

    join_room(player, room)
    return jsonify(room.to_dict())


@main.route('/api/room/players/<string:code>', methods=['GET'])
def room_players(code):
    room = Room.query.filter_by(code=normalize_code(code)).first()
    if not room:
        return jsonify({'error': 'Room not found'}), 404
    return jsonify({
        'players': [m.to_dict() for m in list_members(room.id)],
        'ownerId': room.owner_id,
    })
