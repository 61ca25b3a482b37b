import time
from typing import Optional

from tapclock.models import GameState

# A player needs at least this much time left to be recorded as winner
MIN_WINNING_TIME_MS = 1


def now_ms() -> int:
    return int(time.time() * 1000)


def advance(state: GameState, now: int) -> None:
    """Deduct the time owed by the current player since the last settlement.

    When the current player runs out, the turn passes round-robin and the
    next player's countdown starts at ``now`` (no negative overflow carries).
    Repeating the call with the same ``now`` deducts nothing.
    """
    if not state.running or not state.players:
        return
    elapsed = max(0, now - state.last_tick_timestamp)
    current = state.current_player
    current.remaining_time = max(0, current.remaining_time - elapsed)
    state.last_tick_timestamp = now

    if current.remaining_time <= 0:
        state.current_player_index = (state.current_player_index + 1) % len(state.players)
        state.last_tick_timestamp = now


def is_over(state: GameState) -> bool:
    return sum(1 for p in state.players if p.is_alive()) <= 1


def find_winner(state: GameState) -> Optional[int]:
    """Index of the first player, in turn order, still holding time."""
    for idx, p in enumerate(state.players):
        if p.remaining_time >= MIN_WINNING_TIME_MS:
            return idx
    return None


def finish_if_over(state: GameState) -> bool:
    """Stop a running clock once at most one player has time left."""
    if not state.running or not is_over(state):
        return False
    state.running = False
    state.winner_index = find_winner(state)
    return True
