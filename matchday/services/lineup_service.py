"""Per-game lineup state: creation, membership and derived views."""

from typing import Iterable, List

from ..models import Game, Location, PlayerLineupState
from ..utils import get_logger
from .guards import ensure_editable

logger = get_logger(__name__)


def create_default_lineup(player_ids: Iterable[str]) -> List[PlayerLineupState]:
    """Every player on the bench with zero playtime and counters."""
    return [PlayerLineupState(player_id=player_id) for player_id in player_ids]


def add_player(game: Game, player_id: str) -> PlayerLineupState:
    """Add a player who joined the roster after the game was created."""
    ensure_editable(game)
    existing = game.get_player_state(player_id)
    if existing is not None:
        return existing
    state = PlayerLineupState(player_id=player_id)
    game.lineup.append(state)
    logger.debug("Added player %s to game %s", player_id, game.id)
    return state


def drop_player(game: Game, player_id: str) -> bool:
    """Remove a player's lineup entry; True if one was removed."""
    before = len(game.lineup)
    game.lineup = [state for state in game.lineup if state.player_id != player_id]
    return len(game.lineup) != before


def starting_lineup(game: Game) -> List[PlayerLineupState]:
    """Starters who began on the field, i.e. those with a starting position."""
    return [
        state for state in game.lineup
        if state.is_starter and state.initial_position is not None
    ]


def location_counts(game: Game) -> dict:
    return {location.value: len(game.players_at(location)) for location in Location}
