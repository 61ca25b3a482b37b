from tapclock.models import GameState, Player
from .clock import advance


def join(state: GameState, name: str, player_id: str, now: int) -> Player:
    """Add a player under ``name``, or rebind an existing one to a new id.

    Rejoining keeps the player's remaining time and turn position; only the
    connection-bound id changes.
    """
    advance(state, now)
    player = state.find_player(name)
    if player:
        player.id = player_id
        return player
    player = Player(name=name, remaining_time=state.time_limit, player_id=player_id)
    state.players.append(player)
    return player


def tap(state: GameState, player_id: str, now: int) -> bool:
    """Apply a tap and return whether it changed the clock.

    The first tap starts the clock. Once running, only the player whose
    countdown is active may tap; that ends their turn. Taps from anyone else
    are ignored.
    """
    advance(state, now)
    if not state.players:
        return False

    if not state.running:
        state.running = True
        state.last_tick_timestamp = now
        state.winner_index = None
        # Starting player hands the clock straight to the next player
        if state.current_player.id == player_id:
            _pass_turn(state, now)
        return True

    if state.current_player.id != player_id:
        return False
    _pass_turn(state, now)
    return True


def reset(state: GameState, now: int) -> None:
    """Stop the clock and refill every player; the current index is recorded as the winner marker."""
    advance(state, now)
    state.running = False
    for p in state.players:
        p.remaining_time = state.time_limit
    # Keeps the current position as the marker rather than clearing it
    state.winner_index = state.current_player_index if state.players else None


def change_time_limit(state: GameState, new_limit: int, now: int) -> None:
    """Stop the clock and restart every player on a new positive limit, clearing the winner."""
    if isinstance(new_limit, bool) or not isinstance(new_limit, int) or new_limit <= 0:
        raise ValueError(f"time limit must be a positive number of milliseconds, got {new_limit!r}")
    advance(state, now)
    state.running = False
    state.time_limit = new_limit
    for p in state.players:
        p.remaining_time = new_limit
    state.winner_index = None


def _pass_turn(state: GameState, now: int) -> None:
    state.current_player_index = (state.current_player_index + 1) % len(state.players)
    state.last_tick_timestamp = now
