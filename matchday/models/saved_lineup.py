"""Saved lineup templates: reusable bench/field snapshots independent of any game."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .game import FieldPosition, Location


@dataclass(frozen=True)
class LineupSlot:
    """One player's saved location (and field position)."""
    player_id: str
    location: Location
    position: Optional[FieldPosition] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "location": self.location.value,
            "position": self.position.to_dict() if self.position else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LineupSlot":
        location = Location(data.get("location", Location.BENCH.value))
        position = FieldPosition.from_dict(data.get("position"))
        return cls(
            player_id=str(data["player_id"]),
            location=location,
            position=position if location is Location.FIELD else None,
        )


@dataclass
class SavedLineup:
    """
    A named lineup template.

    Attributes:
        id: Identifier assigned by the durable store
        team_id: Owning team
        name: Unique per team; saving under an existing name replaces it
        slots: Saved location of each player at save time
    """
    id: str
    team_id: str
    name: str
    slots: List[LineupSlot] = field(default_factory=list)

    def slot_map(self) -> Dict[str, LineupSlot]:
        return {slot.player_id: slot for slot in self.slots}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "team_id": self.team_id,
            "name": self.name,
            "slots": [slot.to_dict() for slot in self.slots],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SavedLineup":
        return cls(
            id=str(data["id"]),
            team_id=data.get("team_id", ""),
            name=data["name"],
            slots=[LineupSlot.from_dict(slot) for slot in data.get("slots") or []],
        )
