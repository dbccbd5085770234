"""
Player model for the match-day tracker.

Players are owned by the roster collaborator. The engine only ever references
them by id, so this model carries identity and display fields only.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Player:
    """
    A roster player.

    Attributes:
        id: Stable identifier used by every lineup and event reference
        first_name: Given name
        last_name: Family name
        number: Jersey number (optional)
    """
    id: str
    first_name: str = ""
    last_name: str = ""
    number: Optional[str] = None

    @property
    def display_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "number": self.number,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        number = data.get("number")
        return cls(
            id=str(data["id"]),
            first_name=data.get("first_name") or "",
            last_name=data.get("last_name") or "",
            number=str(number) if number not in (None, "") else None,
        )
