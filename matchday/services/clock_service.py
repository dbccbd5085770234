"""
Match clock and playtime accumulation for the match-day tracker.

Elapsed time is always recomputed from two fixed points: the seconds
accumulated by completed running intervals and the instant the clock was last
started. Nothing here advances state on a tick; display refreshes only read.
"""
from typing import Optional

from ..models import Game, Location, PlayerLineupState, SessionState, TimerStatus
from ..utils import PLAYTIME_LOCATIONS, now_ts, get_logger
from .guards import ensure_editable

logger = get_logger(__name__)

_PLAYTIME_LOCATIONS = tuple(Location(value) for value in PLAYTIME_LOCATIONS)


def elapsed_seconds(game: Game, now: Optional[float] = None) -> int:
    """
    Match seconds elapsed at ``now``.

    Args:
        game: Game to read
        now: Instant to evaluate at (defaults to the current time)

    Returns:
        Accumulated seconds plus the running interval, rounded to whole seconds
    """
    total = float(game.timer_elapsed_seconds)
    if game.timer_status is TimerStatus.RUNNING and game.timer_start_ts is not None:
        current = now if now is not None else now_ts()
        total += max(0.0, current - game.timer_start_ts)
    return int(round(total))


def is_fresh_start(game: Game) -> bool:
    """True before the clock has ever been started for this session."""
    return game.timer_elapsed_seconds == 0 and game.timer_start_ts is None


def is_game_active(game: Game) -> bool:
    """A game is active once kicked off: running, or paused with time on the clock."""
    if game.timer_status is TimerStatus.RUNNING:
        return True
    return game.timer_elapsed_seconds > 0


def fold_playtime(state: PlayerLineupState, now: float) -> None:
    """Add a running stint to the player's accumulated playtime and clear it."""
    if state.playtimer_start_ts is None:
        return
    state.playtime_seconds = int(round(state.playtime_seconds + max(0.0, now - state.playtimer_start_ts)))
    state.playtimer_start_ts = None


def current_playtime_seconds(state: PlayerLineupState, now: Optional[float] = None) -> int:
    """Playtime for display: accumulated seconds plus any running stint."""
    if state.playtimer_start_ts is None:
        return state.playtime_seconds
    current = now if now is not None else now_ts()
    return state.playtime_seconds + state.current_stint_seconds(current)


def start_clock(game: Game, now: Optional[float] = None) -> bool:
    """
    Start or resume the clock and begin playtime stints.

    On the first-ever start every player on the field or bench becomes a
    starter and field players keep their current position as their
    starting position.

    Returns:
        True if this was the session's first start (kickoff)
    """
    ensure_editable(game)
    if game.timer_status is TimerStatus.RUNNING:
        return False

    current = now if now is not None else now_ts()
    kickoff = is_fresh_start(game)

    for state in game.lineup:
        if kickoff:
            state.is_starter = state.location in (Location.FIELD, Location.BENCH)
            if state.location is Location.FIELD:
                state.initial_position = state.position
        if state.location is Location.FIELD:
            state.playtimer_start_ts = current

    game.timer_status = TimerStatus.RUNNING
    game.timer_start_ts = current
    logger.debug("Clock started for game %s at %.3f (kickoff=%s)", game.id, current, kickoff)
    return kickoff


def stop_clock(game: Game, now: Optional[float] = None) -> int:
    """
    Stop the clock, folding the running interval and every running stint.

    Returns:
        Elapsed match seconds after stopping
    """
    ensure_editable(game)
    current = now if now is not None else now_ts()

    if game.timer_status is TimerStatus.RUNNING and game.timer_start_ts is not None:
        game.timer_elapsed_seconds = int(round(
            game.timer_elapsed_seconds + max(0.0, current - game.timer_start_ts)
        ))

    for state in game.lineup:
        if state.location in _PLAYTIME_LOCATIONS:
            fold_playtime(state, current)

    game.timer_status = TimerStatus.STOPPED
    game.timer_start_ts = None
    logger.debug("Clock stopped for game %s at %ss", game.id, game.timer_elapsed_seconds)
    return game.timer_elapsed_seconds


def clear_running_stints(game: Game) -> None:
    """Drop every remaining stint start without crediting it."""
    for state in game.lineup:
        state.playtimer_start_ts = None


def reset_clock(game: Game) -> None:
    """Return the clock to its never-started state."""
    game.timer_status = TimerStatus.STOPPED
    game.timer_start_ts = None
    game.timer_elapsed_seconds = 0


def session_state(game: Game) -> SessionState:
    """Lifecycle state: not started, running, paused or finished."""
    if game.is_finished or game.is_durable:
        return SessionState.FINISHED
    if game.timer_status is TimerStatus.RUNNING:
        return SessionState.RUNNING
    if game.timer_elapsed_seconds > 0:
        return SessionState.PAUSED
    return SessionState.NOT_STARTED
