"""Preconditions shared by every gameplay mutator."""

from ..models import Game, PlayerLineupState
from .errors import GameFinishedError, NotFoundError


def ensure_editable(game: Game) -> None:
    """Reject gameplay changes to finished (durably stored) games."""
    if game.is_finished or game.is_durable:
        raise GameFinishedError(f"Game {game.id} is finished and cannot be changed")


def require_player(game: Game, player_id: str) -> PlayerLineupState:
    state = game.get_player_state(player_id)
    if state is None:
        raise NotFoundError(f"Player {player_id} is not in the lineup of game {game.id}")
    return state
