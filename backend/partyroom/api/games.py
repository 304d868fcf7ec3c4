from flask import Blueprint, jsonify, request, current_app
from partyroom.directory import as_int
from partyroom.services.games import (
    Reason,
    sessions,
    start_puzzle,
    start_quiz,
    submit_answer,
    validate_scan,
)


games = Blueprint('games', __name__)

_START_FAILURE_STATUS = {
    Reason.ROOM_NOT_FOUND: 404,
    Reason.NO_PLAYERS: 400,
}


def _start_response(result):
    if result.success:
        return jsonify(result.to_dict())
    return jsonify(result.to_dict()), _START_FAILURE_STATUS.get(result.reason, 400)


@games.route('/<string:room_code>/quiz/start', methods=['POST'])
def quiz_start(room_code):
    result = start_quiz(current_app._get_current_object(), room_code)
    return _start_response(result)


@games.route('/<string:room_code>/quiz/answer', methods=['POST'])
def quiz_answer(room_code):
    data = request.get_json(silent=True) or {}
    chosen_index = as_int(data.get('chosenIndex'))
    if chosen_index is None:
        return jsonify({'error': 'chosenIndex must be an integer'}), 400
    result = submit_answer(current_app._get_current_object(), room_code, chosen_index)
    return jsonify(result.to_dict())


@games.route('/<string:room_code>/puzzle/start', methods=['POST'])
def puzzle_start(room_code):
    result = start_puzzle(current_app._get_current_object(), room_code)
    return _start_response(result)


@games.route('/<string:room_code>/puzzle/scan', methods=['POST'])
def puzzle_scan(room_code):
    data = request.get_json(silent=True) or {}
    player_id = as_int(data.get('playerId'))
    token = data.get('token')
    if player_id is None or not isinstance(token, str) or not token:
        return jsonify({'error': 'playerId and token are required'}), 400
    # Scan outcomes are values: wrong item / wrong turn still answer 200
    result = validate_scan(current_app._get_current_object(), room_code, player_id, token)
    return jsonify(result.to_dict())


@games.route('/<string:room_code>/session', methods=['GET'])
def session_state(room_code):
    snapshot = sessions.snapshot(room_code)
    if snapshot is None:
        return jsonify({'error': 'No live game for this room'}), 404
    return jsonify(snapshot)
