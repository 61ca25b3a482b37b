import uuid
from typing import List, Optional


def generate_player_id() -> str:
    """Generate an opaque id for a player's current connection."""
    return uuid.uuid4().hex


class Player:
    def __init__(self, name: str, remaining_time: int, player_id: Optional[str] = None):
        self.id = player_id or generate_player_id()
        self.name = name
        self.remaining_time = remaining_time

    def is_alive(self) -> bool:
        return self.remaining_time > 0

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'remainingTime': self.remaining_time,
        }

    def __repr__(self):
        return f"<Player {self.name!r} remaining={self.remaining_time}>"


class GameState:
    """Timing and turn-order state of one room.

    ``players`` is kept in join order, which is also the turn order.
    ``winner_index`` is None while no winner has been recorded.
    """

    def __init__(self, time_limit: int, now: int = 0):
        self.players: List[Player] = []
        self.current_player_index = 0
        self.last_tick_timestamp = now
        self.running = False
        self.time_limit = time_limit
        self.winner_index: Optional[int] = None

    @property
    def current_player(self) -> Optional[Player]:
        if not self.players:
            return None
        return self.players[self.current_player_index]

    def find_player(self, name: str) -> Optional[Player]:
        for p in self.players:
            if p.name == name:
                return p
        return None

    def to_dict(self):
        return {
            'players': [p.to_dict() for p in self.players],
            'currentPlayerIndex': self.current_player_index,
            'lastTickTimestamp': self.last_tick_timestamp,
            'running': self.running,
            'timeLimit': self.time_limit,
            'winnerIndex': self.winner_index,
        }
