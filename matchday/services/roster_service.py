"""
Roster collaborator: the single in-process owner of player identities.

The tracker never creates or renames players. The external roster pushes its
current list in with ``replace_all`` and reports deletions with
``remove_player``, which notifies every subscriber synchronously.
"""
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..models import Player
from ..utils import get_logger
from .errors import ValidationError

logger = get_logger(__name__)

PlayerRemovedCallback = Callable[[str], None]


class Roster:
    """Read-only view of the current players plus a "player removed" notification."""

    def __init__(self, players: Optional[Iterable[Player]] = None):
        self._players: Dict[str, Player] = {}
        self._subscribers: List[PlayerRemovedCallback] = []
        if players:
            self.replace_all(players)

    @property
    def players(self) -> Tuple[Player, ...]:
        return tuple(self._players.values())

    def get(self, player_id: str) -> Optional[Player]:
        return self._players.get(player_id)

    def ids(self) -> List[str]:
        return list(self._players.keys())

    def __contains__(self, player_id: str) -> bool:
        return player_id in self._players

    def __len__(self) -> int:
        return len(self._players)

    def replace_all(self, players: Iterable[Player]) -> None:
        """
        Replace the current player list.

        Players missing from the new list are not treated as deletions;
        use ``remove_player`` for that.

        Raises:
            ValidationError: If two players share an id
        """
        incoming: Dict[str, Player] = {}
        for player in players:
            if player.id in incoming:
                raise ValidationError(f"Duplicate player id {player.id!r} in roster")
            incoming[player.id] = player
        self._players = incoming
        logger.debug("Roster now holds %d players", len(incoming))

    def subscribe(self, callback: PlayerRemovedCallback) -> None:
        self._subscribers.append(callback)

    def remove_player(self, player_id: str) -> bool:
        """
        Remove a player and notify subscribers.

        Returns:
            True if the player was on the roster
        """
        if self._players.pop(player_id, None) is None:
            logger.warning("Cannot remove unknown player %s", player_id)
            return False
        logger.info("Player %s removed from roster", player_id)
        for callback in list(self._subscribers):
            callback(player_id)
        return True
