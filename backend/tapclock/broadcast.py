from typing import Callable, Optional

from tapclock.rooms import Room

NAMESPACE = '/ws'


class BroadcastGateway:
    """Fan a room's full state out to every connection subscribed to it.

    ``emit(event, payload, to)`` delivers to one connection and
    ``is_connected(sid)`` tells whether that connection can still receive.
    Both are bound to the Socket.IO server by ``init_app``.
    """

    def __init__(self, emit: Optional[Callable] = None, is_connected: Optional[Callable] = None):
        self._emit = emit
        self._is_connected = is_connected

    def init_app(self, socketio, namespace: str = NAMESPACE) -> None:
        def _emit(event, payload, to):
            socketio.emit(event, payload, to=to, namespace=namespace)

        def _is_connected(sid):
            server = socketio.server
            return server is not None and server.manager.is_connected(sid, namespace)

        self._emit = _emit
        self._is_connected = _is_connected

    def broadcast(self, room: Room) -> int:
        """Send the room's snapshot to all deliverable connections."""
        if self._emit is None:
            return 0
        payload = room.to_dict()
        delivered = 0
        for sid in list(room.connections):
            if self._is_connected is not None and not self._is_connected(sid):
                continue
            self._emit('gameState', payload, sid)
            delivered += 1
        return delivered
