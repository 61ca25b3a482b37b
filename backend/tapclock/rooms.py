import threading
from typing import Dict, List, Optional, Set

from tapclock.models import GameState


class Room:
    """One chess-clock session and the connections subscribed to it."""

    def __init__(self, room_id: str, time_limit: int, now: int = 0):
        self.room_id = room_id
        self.state = GameState(time_limit=time_limit, now=now)
        self.connections: Set[str] = set()

    def add_connection(self, sid: str) -> None:
        self.connections.add(sid)

    def remove_connection(self, sid: str) -> None:
        self.connections.discard(sid)

    def to_dict(self):
        payload = {'roomId': self.room_id}
        payload.update(self.state.to_dict())
        return payload


class RoomRegistry:
    """Process-wide map of room id to Room.

    Rooms are created on first reference and are never evicted on their own;
    ``remove`` exists so an eviction policy can be layered on later. All
    access from socket handlers and the tick sweep goes through ``lock``.
    """

    def __init__(self, default_time_limit: int = 30000):
        self.default_time_limit = default_time_limit
        self.lock = threading.RLock()
        self._rooms: Dict[str, Room] = {}

    def init_app(self, app) -> None:
        with self.lock:
            self.default_time_limit = int(app.config.get('DEFAULT_TIME_LIMIT_MS', self.default_time_limit))
            self._rooms.clear()
        app.extensions['room_registry'] = self

    def create(self, room_id: str, now: int = 0) -> Room:
        with self.lock:
            if room_id in self._rooms:
                raise KeyError(f"room {room_id!r} already exists")
            room = Room(room_id, self.default_time_limit, now=now)
            self._rooms[room_id] = room
            return room

    def get(self, room_id: str) -> Optional[Room]:
        with self.lock:
            return self._rooms.get(room_id)

    def get_or_create(self, room_id: str, now: int = 0) -> Room:
        with self.lock:
            room = self._rooms.get(room_id)
            if room is None:
                room = self.create(room_id, now=now)
            return room

    def remove(self, room_id: str) -> Optional[Room]:
        with self.lock:
            return self._rooms.pop(room_id, None)

    def rooms(self) -> List[Room]:
        with self.lock:
            return list(self._rooms.values())

    def __contains__(self, room_id) -> bool:
        with self.lock:
            return room_id in self._rooms

    def __len__(self) -> int:
        with self.lock:
            return len(self._rooms)
