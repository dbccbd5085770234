"""Dataclasses representing the post-game (or live) summary of a session."""

from dataclasses import dataclass, field
from typing import List, Optional

from .game import FieldPosition


@dataclass
class PlayerStatLine:
    """Raw counters for a single player in one game."""

    player_id: str
    goals: int
    assists: int
    playtime_seconds: int
    is_starter: bool
    starting_position: Optional[FieldPosition]
    subbed_on_count: int
    subbed_off_count: int


@dataclass
class SubstitutionRecord:
    """A substitution seen as one record, paired from the sibling log entries."""

    team: str
    game_seconds: int
    timestamp: float
    player_in_id: Optional[str] = None
    player_out_id: Optional[str] = None


@dataclass
class GameSummary:
    """Snapshot of score, timeline and per-player counters for a game."""

    game_id: str
    elapsed_seconds: int
    home_score: int
    away_score: int
    players: List[PlayerStatLine] = field(default_factory=list)
    substitutions: List[SubstitutionRecord] = field(default_factory=list)
    starting_lineup: List[str] = field(default_factory=list)
