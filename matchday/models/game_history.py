"""Recently used season and competition labels, newest first."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..utils.constants import HISTORY_MAX_ENTRIES


def _labels(values: Any) -> List[str]:
    if not isinstance(values, list):
        return []
    return [v for v in values if isinstance(v, str)]


def _promote(values: List[str], value: Optional[str]) -> List[str]:
    if not value or not value.strip():
        return values
    value = value.strip()
    return ([value] + [v for v in values if v != value])[:HISTORY_MAX_ENTRIES]


@dataclass
class GameHistory:
    seasons: List[str] = field(default_factory=list)
    competitions: List[str] = field(default_factory=list)

    def record(self, season: Optional[str] = None, competition: Optional[str] = None) -> None:
        """Move the given labels to the front of their lists."""
        self.seasons = _promote(self.seasons, season)
        self.competitions = _promote(self.competitions, competition)

    def most_recent_season(self) -> Optional[str]:
        return self.seasons[0] if self.seasons else None

    def most_recent_competition(self) -> Optional[str]:
        return self.competitions[0] if self.competitions else None

    def to_dict(self) -> Dict[str, Any]:
        return {"seasons": list(self.seasons), "competitions": list(self.competitions)}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "GameHistory":
        if not isinstance(data, dict):
            return cls()
        return cls(
            seasons=_labels(data.get("seasons")),
            competitions=_labels(data.get("competitions")),
        )
