"""
Immediate player moves between bench, field and inactive.

Once a game has kicked off, bench-to-field and field-to-bench moves are
match substitutions: they bump the player's counters and append a
substitution entry. Moves into or out of inactive are administrative and
never logged.
"""
from typing import List, Optional

from ..models import FieldPosition, Game, GameEvent, Location
from ..utils import now_ts, get_logger
from .clock_service import fold_playtime, is_game_active
from .errors import ValidationError
from .event_recorder import record_substitution
from .guards import ensure_editable, require_player

logger = get_logger(__name__)


def move_player(
    game: Game,
    player_id: str,
    from_location: Optional[Location],
    to_location: Location,
    new_position: Optional[FieldPosition] = None,
    now: Optional[float] = None,
) -> Optional[GameEvent]:
    """
    Move one player and keep playtime and the event log consistent.

    Args:
        game: Game being played
        player_id: Player to move
        from_location: Location the caller believes the player is in
        to_location: Destination
        new_position: Field position, used when moving to the field
        now: Wall-clock instant of the move

    Returns:
        The substitution entry appended, if the move was a substitution

    Raises:
        GameFinishedError: If the game is finished
        NotFoundError: If the player is not in the game's lineup
        ValidationError: If the player would be on the field without a position
    """
    ensure_editable(game)
    state = require_player(game, player_id)
    current = now if now is not None else now_ts()

    if to_location is Location.FIELD and new_position is None and (
        state.location is not Location.FIELD or state.position is None
    ):
        raise ValidationError(f"A field position is required to put {player_id} on the field")

    source = state.location
    if from_location is not None and from_location is not source:
        logger.warning(
            "Move of %s in game %s claimed source %s but player is at %s",
            player_id, game.id, from_location.value, source.value,
        )

    active = is_game_active(game)

    if to_location is Location.FIELD:
        if game.is_running and state.playtimer_start_ts is None:
            state.playtimer_start_ts = current
        state.position = new_position if new_position is not None else state.position
    elif to_location is Location.BENCH:
        fold_playtime(state, current)
        state.position = None
    else:
        # a running stint carries on while inactive
        state.position = None

    state.location = to_location

    event = None
    if active and source is Location.BENCH and to_location is Location.FIELD:
        state.subbed_on_count += 1
        event = record_substitution(game, player_in_id=player_id, now=current)
    elif active and source is Location.FIELD and to_location is Location.BENCH:
        state.subbed_off_count += 1
        event = record_substitution(game, player_out_id=player_id, now=current)

    logger.debug(
        "Moved %s %s -> %s in game %s%s",
        player_id, source.value, to_location.value, game.id,
        " (substitution)" if event else "",
    )
    return event


def swap_players(
    game: Game,
    incoming_id: str,
    outgoing_id: str,
    now: Optional[float] = None,
) -> List[GameEvent]:
    """
    Put ``incoming_id`` on the field in place of ``outgoing_id``.

    The outgoing field player takes the incoming player's previous location
    (and position, if both were on the field), then the incoming player
    takes the vacated field position.

    Returns:
        Substitution entries appended by the two moves

    Raises:
        ValidationError: If the outgoing player has no field position
    """
    ensure_editable(game)
    incoming = require_player(game, incoming_id)
    outgoing = require_player(game, outgoing_id)
    current = now if now is not None else now_ts()

    incoming_location = incoming.location
    incoming_position = incoming.position
    vacated_position = outgoing.position
    if vacated_position is None:
        raise ValidationError(f"{outgoing_id} has no field position for {incoming_id} to take")

    events = []
    first = move_player(
        game, outgoing_id, Location.FIELD, incoming_location,
        incoming_position if incoming_location is Location.FIELD else None,
        now=current,
    )
    if first is not None:
        events.append(first)
    second = move_player(
        game, incoming_id, incoming_location, Location.FIELD, vacated_position, now=current,
    )
    if second is not None:
        events.append(second)
    return events
