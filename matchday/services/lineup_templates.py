"""
Planning roster and saved lineup templates.

The lineup draft is the bench/field arrangement of the roster outside any
game. Templates snapshot that arrangement and restore it later; they never
touch playtime, events or games.
"""
from typing import Dict, Iterable, List, Optional, Tuple

from ..models import FieldPosition, LineupSlot, Location, Player, SavedLineup
from ..utils import get_logger
from .errors import NotFoundError, PersistenceError, ValidationError
from .persistence_service import DurableStore

logger = get_logger(__name__)

_DRAFT_LOCATIONS = (Location.BENCH, Location.FIELD)


class LineupDraft:
    """Process-wide bench/field assignment for every roster player."""

    def __init__(self, player_ids: Optional[Iterable[str]] = None):
        self._slots: Dict[str, Tuple[Location, Optional[FieldPosition]]] = {}
        if player_ids:
            for player_id in player_ids:
                self._slots[player_id] = (Location.BENCH, None)

    def sync_with_roster(self, players: Iterable[Player]) -> None:
        """New players join at the bench; players no longer on the roster are dropped."""
        current = {}
        for player in players:
            current[player.id] = self._slots.get(player.id, (Location.BENCH, None))
        self._slots = current

    def remove(self, player_id: str) -> None:
        self._slots.pop(player_id, None)

    def location_of(self, player_id: str) -> Location:
        return self._require(player_id)[0]

    def position_of(self, player_id: str) -> Optional[FieldPosition]:
        return self._require(player_id)[1]

    def _require(self, player_id: str) -> Tuple[Location, Optional[FieldPosition]]:
        slot = self._slots.get(player_id)
        if slot is None:
            raise NotFoundError(f"Player {player_id} is not in the lineup draft")
        return slot

    def move(self, player_id: str, location: Location, position: Optional[FieldPosition] = None) -> None:
        """
        Place a player on the bench or the field.

        Raises:
            NotFoundError: If the player is not in the draft
            ValidationError: For other locations, or a field move without a position
        """
        self._require(player_id)
        if location not in _DRAFT_LOCATIONS:
            raise ValidationError(f"Lineup draft only supports bench and field, not {location.value}")
        if location is Location.FIELD and position is None:
            raise ValidationError("A field position is required to place a player on the field")
        self._slots[player_id] = (location, position if location is Location.FIELD else None)

    def swap(self, first_id: str, second_id: str) -> None:
        """Exchange the location and position of two players."""
        first = self._require(first_id)
        second = self._require(second_id)
        self._slots[first_id] = second
        self._slots[second_id] = first

    def reset(self) -> None:
        """Everyone back to the bench."""
        for player_id in self._slots:
            self._slots[player_id] = (Location.BENCH, None)

    def snapshot(self) -> List[LineupSlot]:
        return [
            LineupSlot(player_id=player_id, location=location, position=position)
            for player_id, (location, position) in self._slots.items()
        ]

    def apply(self, slots: Iterable[LineupSlot]) -> None:
        """
        Restore saved slots.

        Players without a slot go to the bench; slots for players not in the
        draft are ignored.
        """
        saved = {slot.player_id: slot for slot in slots}
        for player_id in self._slots:
            slot = saved.get(player_id)
            if slot is None or slot.location not in _DRAFT_LOCATIONS:
                self._slots[player_id] = (Location.BENCH, None)
            elif slot.location is Location.FIELD and slot.position is None:
                self._slots[player_id] = (Location.BENCH, None)
            else:
                self._slots[player_id] = (slot.location, slot.position)

    def to_dict(self) -> List[Dict]:
        return [slot.to_dict() for slot in self.snapshot()]


class SavedLineupService:
    """
    Saved lineup templates of one team, backed by the durable store.

    The in-memory list only changes after the store confirms a write, so a
    failed save or delete leaves it as it was.
    """

    def __init__(self, store: DurableStore, team_id: str, draft: LineupDraft):
        self.store = store
        self.team_id = team_id
        self.draft = draft
        self._templates: Dict[str, SavedLineup] = {}

    @property
    def templates(self) -> List[SavedLineup]:
        return sorted(self._templates.values(), key=lambda t: t.name.lower())

    def get(self, name: str) -> Optional[SavedLineup]:
        return self._templates.get(name.strip())

    def refresh(self) -> List[SavedLineup]:
        """
        Reload templates from the durable store.

        On failure the list is emptied and the error logged, matching how
        other load-time read problems are handled.
        """
        result = self.store.fetch_templates(self.team_id)
        if not result.ok:
            logger.error("Could not load saved lineups: %s", result.error)
            self._templates = {}
            return []
        self._templates = {template.name: template for template in result.data}
        return self.templates

    def save(self, name: str) -> SavedLineup:
        """
        Save the current draft under ``name``, replacing a template of the same name.

        Raises:
            ValidationError: If the name is blank
            PersistenceError: If the durable write fails
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("A lineup name is required")

        existing = self._templates.get(name)
        lineup = SavedLineup(
            id=existing.id if existing else "",
            team_id=self.team_id,
            name=name,
            slots=self.draft.snapshot(),
        )
        result = self.store.upsert_template(lineup)
        if not result.ok:
            logger.error("Saving lineup %r failed: %s", name, result.error)
            raise PersistenceError(f"Failed to save lineup {name!r}: {result.error}")

        stored = result.data
        self._templates[stored.name] = stored
        logger.info("Saved lineup %r", stored.name)
        return stored

    def load(self, name: str) -> SavedLineup:
        """
        Apply a template to the draft.

        Raises:
            NotFoundError: If no template has that name
        """
        template = self.get(name)
        if template is None:
            raise NotFoundError(f"No saved lineup named {name!r}")
        self.draft.apply(template.slots)
        logger.debug("Loaded lineup %r into the draft", template.name)
        return template

    def delete(self, name: str) -> None:
        """
        Delete a template by name.

        Raises:
            NotFoundError: If no template has that name
            PersistenceError: If the durable delete fails
        """
        template = self.get(name)
        if template is None:
            raise NotFoundError(f"No saved lineup named {name!r}")
        result = self.store.delete_template(template.id)
        if not result.ok:
            logger.error("Deleting lineup %r failed: %s", template.name, result.error)
            raise PersistenceError(f"Failed to delete lineup {template.name!r}: {result.error}")
        del self._templates[template.name]
        logger.info("Deleted lineup %r", template.name)
