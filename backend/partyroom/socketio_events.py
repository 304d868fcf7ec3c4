from flask_socketio import join_room, leave_room, emit
from partyroom import socketio
from flask import current_app, request
from partyroom.broadcast import NAMESPACE, room_channel
from partyroom.directory import as_int, normalize_code
from partyroom.services.games import (
    sessions,
    start_puzzle,
    start_quiz,
    submit_answer,
    validate_scan,
)
from typing import Dict, Set
import time


# ---- Subscription tracking ----
_sid_rooms: Dict[str, Set[str]] = {}
_subscribers: Dict[str, Set[str]] = {}
_release_deadline: Dict[str, float] = {}


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _room_code(data) -> str:
    # Clients send either the bare code or {"roomCode": code}
    raw = data if isinstance(data, str) else (data or {}).get('roomCode')
    return normalize_code(raw) if isinstance(raw, str) else ''


def _app():
    return current_app._get_current_object()


def handle_connect(auth=None):
    emit('connected', {'message': f'Connected to {NAMESPACE}'})


def handle_disconnect(reason=None):
    sid = _get_sid()
    for code in _sid_rooms.pop(sid, set()):
        _unsubscribe(sid, code)


def handle_join_room(data):
    code = _room_code(data)
    if not code:
        emit('error', {'message': 'roomCode is required'})
        return
    channel = room_channel(code)
    join_room(channel)
    sid = _get_sid()
    _sid_rooms.setdefault(sid, set()).add(code)
    _subscribers.setdefault(code, set()).add(sid)
    _release_deadline.pop(code, None)
    emit('joined', {'room': channel, 'roomCode': code})


def handle_leave_room(data):
    code = _room_code(data)
    if not code:
        emit('error', {'message': 'roomCode is required'})
        return
    channel = room_channel(code)
    leave_room(channel)
    sid = _get_sid()
    _sid_rooms.get(sid, set()).discard(code)
    _unsubscribe(sid, code)
    emit('left', {'room': channel, 'roomCode': code})


def handle_start_game(data):
    code = _room_code(data)
    if not code:
        emit('error', {'message': 'roomCode is required'})
        return
    result = start_quiz(_app(), code)
    if not result.success:
        emit('error', result.to_dict())


def handle_answer(data):
    code = _room_code(data)
    chosen_index = as_int((data or {}).get('chosenIndex')) if isinstance(data, dict) else None
    if not code or chosen_index is None:
        emit('error', {'message': 'roomCode and an integer chosenIndex are required'})
        return
    return submit_answer(_app(), code, chosen_index).to_dict()


def handle_start_game2(data):
    code = _room_code(data)
    if not code:
        emit('error', {'message': 'roomCode is required'})
        return
    result = start_puzzle(_app(), code)
    if not result.success:
        emit('error', result.to_dict())


def handle_scan_item(data):
    code = _room_code(data)
    payload = data if isinstance(data, dict) else {}
    player_id = as_int(payload.get('playerId'))
    token = payload.get('token')
    if not code or player_id is None or not isinstance(token, str) or not token:
        emit('error', {'message': 'roomCode, playerId and token are required'})
        return
    result = validate_scan(_app(), code, player_id, token).to_dict()
    emit('scanResult', result)
    return result


def handle_ping(data):
    emit('pong', data or {})


# ---- Room activity lifecycle helpers ----

def _unsubscribe(sid: str, code: str) -> None:
    subs = _subscribers.get(code)
    if subs is None:
        return
    subs.discard(sid)
    if not subs:
        _subscribers.pop(code, None)
        _schedule_release(code)


def _release_room(app, code: str) -> None:
    """Drop the room's live game state; a running quiz driver stops at its next step."""
    _release_deadline.pop(code, None)
    dropped = sessions.discard(code)
    app.logger.info(f"[room-release] room={code} dropped={dropped}")


def _schedule_release(code: str) -> None:
    app = _app()
    grace = float(app.config.get('ROOM_RELEASE_GRACE_SEC', 30))
    # In tests, release immediately for determinism; in prod, allow a grace period
    if app.config.get('TESTING') or grace <= 0:
        _release_room(app, code)
        return
    deadline = time.time() + grace
    _release_deadline[code] = deadline

    def _runner(room_code: str, expected_deadline: float):
        sleep_for = max(0.0, expected_deadline - time.time())
        if sleep_for:
            socketio.sleep(sleep_for)
        if not _subscribers.get(room_code) and _release_deadline.get(room_code) == expected_deadline:
            _release_room(app, room_code)

    socketio.start_background_task(_runner, code, deadline)


def reset_subscriptions() -> None:
    _sid_rooms.clear()
    _subscribers.clear()
    _release_deadline.clear()


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the '/ws' namespace."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('joinRoom', handle_join_room, namespace=NAMESPACE)
    socketio.on_event('leaveRoom', handle_leave_room, namespace=NAMESPACE)
    socketio.on_event('startGame', handle_start_game, namespace=NAMESPACE)
    socketio.on_event('answer', handle_answer, namespace=NAMESPACE)
    socketio.on_event('startGame2', handle_start_game2, namespace=NAMESPACE)
    socketio.on_event('scanItem', handle_scan_item, namespace=NAMESPACE)
    socketio.on_event('ping', handle_ping, namespace=NAMESPACE)
