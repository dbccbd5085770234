"""
Substitution planning: stage several bench-to-field swaps, then commit them
together or cancel with no effect on the lineup.
"""
import copy
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..models import FieldPosition, Game, GameEvent, Location
from ..utils import now_ts, get_logger
from .guards import ensure_editable, require_player
from .substitution_service import move_player

logger = get_logger(__name__)


@dataclass(frozen=True)
class PlannedSwap:
    """A bench player staged to replace a field player."""
    bench_player_id: str
    target_field_player_id: str
    target_position: Optional[FieldPosition] = None


class SubstitutionPlanner:
    """
    Staging area for one game's planned substitutions.

    At most one plan exists per bench player and per targeted field player;
    the latest claim wins. Nothing touches the game until ``commit``.
    """

    def __init__(self, game: Game):
        ensure_editable(game)
        self.game = game
        self._pending: Dict[str, PlannedSwap] = {}

    @property
    def pending(self) -> List[PlannedSwap]:
        """Staged swaps in the order they were (last) staged."""
        return list(self._pending.values())

    def is_empty(self) -> bool:
        return not self._pending

    def stage(
        self,
        bench_player_id: str,
        target_field_player_id: str,
        target_position: Optional[FieldPosition] = None,
    ) -> PlannedSwap:
        """
        Stage ``bench_player_id`` to replace ``target_field_player_id``.

        The target position defaults to the field player's current position.

        Raises:
            NotFoundError: If either player is not in the lineup
        """
        require_player(self.game, bench_player_id)
        target = require_player(self.game, target_field_player_id)

        for key, swap in list(self._pending.items()):
            if swap.target_field_player_id == target_field_player_id:
                del self._pending[key]
        self._pending.pop(bench_player_id, None)

        swap = PlannedSwap(
            bench_player_id=bench_player_id,
            target_field_player_id=target_field_player_id,
            target_position=target_position if target_position is not None else target.position,
        )
        self._pending[bench_player_id] = swap
        return swap

    def unstage(self, bench_player_id: str) -> bool:
        return self._pending.pop(bench_player_id, None) is not None

    def cancel(self) -> None:
        self._pending.clear()

    def commit(self, now: Optional[float] = None) -> List[GameEvent]:
        """
        Apply every staged swap: the field player goes to the bench, then the
        bench player takes the field at the planned position.

        Returns:
            Substitution entries appended while applying the plan
        """
        ensure_editable(self.game)
        for swap in self._pending.values():
            require_player(self.game, swap.bench_player_id)
            require_player(self.game, swap.target_field_player_id)

        current = now if now is not None else now_ts()
        lineup_before = [copy.copy(state) for state in self.game.lineup]
        events_before = list(self.game.events)
        events: List[GameEvent] = []

        try:
            for swap in self._pending.values():
                for event in (
                    move_player(self.game, swap.target_field_player_id,
                                Location.FIELD, Location.BENCH, now=current),
                    move_player(self.game, swap.bench_player_id,
                                Location.BENCH, Location.FIELD, swap.target_position, now=current),
                ):
                    if event is not None:
                        events.append(event)
        except Exception:
            self.game.lineup = lineup_before
            self.game.events = events_before
            raise

        logger.info("Committed %d planned substitution(s) in game %s", len(self._pending), self.game.id)
        self._pending.clear()
        return events
