import json
from typing import Dict, NamedTuple

from flask import current_app, request
from flask_socketio import emit

from tapclock import gateway, registry, scheduler, socketio
from tapclock.broadcast import NAMESPACE
from tapclock.models import generate_player_id
from tapclock.services.clock import turns
from tapclock.services.clock.clock import finish_if_over, now_ms


class SessionContext(NamedTuple):
    """Room and player a connection is bound to after joinRoom."""
    room_id: str
    player_id: str


_sid_to_ctx: Dict[str, SessionContext] = {}


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _parse_time_limit(raw) -> int:
    """Whole milliseconds from a JSON number or numeric string; never rounds."""
    if isinstance(raw, bool):
        raise TypeError('time must be a number, not a boolean')
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if not raw.is_integer():
            raise ValueError(f'time must be whole milliseconds, got {raw!r}')
        return int(raw)
    if isinstance(raw, str):
        return int(raw.strip())
    raise TypeError(f'time must be a number, got {type(raw).__name__}')


def handle_connect():
    emit('connected', {'message': f'Connected to {NAMESPACE}'})


def handle_disconnect(*args):
    sid = _get_sid()
    with registry.lock:
        ctx = _sid_to_ctx.pop(sid, None)
        if not ctx:
            return
        room = registry.get(ctx.room_id)
        if room:
            room.remove_connection(sid)
    current_app.logger.info(f"[disconnect] room={ctx.room_id} player={ctx.player_id}")


def handle_join_room(data=None):
    data = data if isinstance(data, dict) else {}
    room_id = data.get('roomId')
    username = data.get('username')
    if not isinstance(room_id, str) or not isinstance(username, str) or not room_id.strip() or not username.strip():
        emit('error', {'message': 'roomId and username are required'})
        return
    room_id = room_id.strip()
    username = username.strip()
    sid = _get_sid()
    now = now_ms()

    with registry.lock:
        room = registry.get_or_create(room_id, now=now)
        state = room.state
        max_players = int(current_app.config.get('MAX_PLAYERS_PER_ROOM', 0) or 0)
        if max_players > 0 and state.find_player(username) is None and len(state.players) >= max_players:
            emit('error', {'message': 'Room is full.'})
            return

        # A connection follows only one room at a time
        previous = _sid_to_ctx.get(sid)
        if previous and previous.room_id != room_id:
            old_room = registry.get(previous.room_id)
            if old_room:
                old_room.remove_connection(sid)

        player = turns.join(state, username, generate_player_id(), now)
        _sid_to_ctx[sid] = SessionContext(room_id, player.id)
        room.add_connection(sid)
        current_app.logger.info(f"[join] room={room_id} player={player.id} name={username}")
        # Joining settles owed time, which can run the active player out
        if finish_if_over(state):
            current_app.logger.info(f"[game-over] room={room_id} winner={state.winner_index}")
        gateway.broadcast(room)

    if not current_app.config.get('TESTING') or current_app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        scheduler.ensure_started(socketio)


def handle_tap(data=None):
    ctx = _sid_to_ctx.get(_get_sid())
    if not ctx:
        return
    with registry.lock:
        room = registry.get(ctx.room_id)
        if not room:
            return
        turns.tap(room.state, ctx.player_id, now_ms())
        if finish_if_over(room.state):
            current_app.logger.info(f"[game-over] room={room.room_id} winner={room.state.winner_index}")
        gateway.broadcast(room)


def handle_reset(data=None):
    ctx = _sid_to_ctx.get(_get_sid())
    if not ctx:
        return
    with registry.lock:
        room = registry.get(ctx.room_id)
        if not room:
            return
        turns.reset(room.state, now_ms())
        current_app.logger.info(f"[reset] room={room.room_id} by={ctx.player_id}")
        gateway.broadcast(room)


def handle_change_time(data=None):
    ctx = _sid_to_ctx.get(_get_sid())
    if not ctx:
        return
    raw = (data or {}).get('time') if isinstance(data, dict) else None
    try:
        new_limit = _parse_time_limit(raw)
    except (TypeError, ValueError):
        emit('error', {'message': 'time must be a number of milliseconds'})
        return
    with registry.lock:
        room = registry.get(ctx.room_id)
        if not room:
            return
        try:
            turns.change_time_limit(room.state, new_limit, now_ms())
        except ValueError as exc:
            emit('error', {'message': str(exc)})
            return
        current_app.logger.info(f"[change-time] room={room.room_id} limit={new_limit}")
        gateway.broadcast(room)


_ACTIONS = {
    'joinRoom': handle_join_room,
    'tap': handle_tap,
    'reset': handle_reset,
    'changeTime': handle_change_time,
}


def handle_message(raw):
    """Dispatch a tagged record ``{"type": ...}`` sent over the plain channel."""
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            current_app.logger.debug("[message-drop] undecodable frame")
            return
    if not isinstance(raw, dict):
        current_app.logger.debug("[message-drop] frame is not an object")
        return
    msg_type = raw.get('type')
    handler = _ACTIONS.get(msg_type.strip()) if isinstance(msg_type, str) else None
    if handler is None:
        current_app.logger.warning(f"[message-unknown] type={msg_type!r}")
        return
    try:
        handler(raw)
    except Exception:
        current_app.logger.exception(f"[message-error] type={msg_type!r}")


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    _sid_to_ctx.clear()
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    for event, handler in _ACTIONS.items():
        socketio.on_event(event, handler, namespace=NAMESPACE)
    socketio.on_event('message', handle_message, namespace=NAMESPACE)
    socketio.on_event('json', handle_message, namespace=NAMESPACE)
