"""
Game model for the match-day tracker.

This module contains the dataclasses that represent one match session: the
clock fields, the per-player lineup states and the append-only event log,
together with their JSON representation.
"""
import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..utils.constants import (
    LOCATION_BENCH, LOCATION_FIELD, LOCATION_INACTIVE, SIDE_AWAY, SIDE_HOME,
)


class Location(Enum):
    """Where a player is within a game."""
    BENCH = LOCATION_BENCH
    FIELD = LOCATION_FIELD
    INACTIVE = LOCATION_INACTIVE


class Side(Enum):
    """A side of the scoreline, also used for the game's venue."""
    HOME = SIDE_HOME
    AWAY = SIDE_AWAY


class TimerStatus(Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class StorageClass(Enum):
    """Which backing store owns the authoritative copy of a game."""
    VOLATILE = "volatile"
    DURABLE = "durable"


class EventType(Enum):
    GOAL = "goal"
    SUBSTITUTION = "substitution"


class SessionState(Enum):
    """Lifecycle state derived from the clock and finish flag."""
    NOT_STARTED = "not_started"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"


@dataclass(frozen=True)
class FieldPosition:
    """A point on the pitch as percentages (0-100) of width and height."""
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["FieldPosition"]:
        if not data:
            return None
        return cls(x=float(data["x"]), y=float(data["y"]))


@dataclass
class PlayerLineupState:
    """
    A player's status within one game.

    Attributes:
        player_id: Roster identifier of the player
        location: Bench, field or inactive
        position: Pitch coordinate, set only while on the field
        initial_position: Field position held when the clock first started
        playtime_seconds: Accumulated playing time, excluding a running stint
        playtimer_start_ts: Start of the running stint (epoch seconds)
        is_starter: Present on field or bench when the clock first started
        subbed_on_count: Times brought on from the bench during the game
        subbed_off_count: Times taken off to the bench during the game
    """
    player_id: str
    location: Location = Location.BENCH
    position: Optional[FieldPosition] = None
    initial_position: Optional[FieldPosition] = None
    playtime_seconds: int = 0
    playtimer_start_ts: Optional[float] = None
    is_starter: bool = False
    subbed_on_count: int = 0
    subbed_off_count: int = 0

    def current_stint_seconds(self, now_ts: float) -> int:
        """Seconds in the running stint, or 0 if no stint is running."""
        if self.playtimer_start_ts is None:
            return 0
        return int(round(max(0.0, now_ts - self.playtimer_start_ts)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "location": self.location.value,
            "position": self.position.to_dict() if self.position else None,
            "initial_position": self.initial_position.to_dict() if self.initial_position else None,
            "playtime_seconds": self.playtime_seconds,
            "playtimer_start_ts": self.playtimer_start_ts,
            "is_starter": self.is_starter,
            "subbed_on_count": self.subbed_on_count,
            "subbed_off_count": self.subbed_off_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlayerLineupState":
        return cls(
            player_id=data["player_id"],
            location=Location(data.get("location", LOCATION_BENCH)),
            position=FieldPosition.from_dict(data.get("position")),
            initial_position=FieldPosition.from_dict(data.get("initial_position")),
            playtime_seconds=int(data.get("playtime_seconds", 0)),
            playtimer_start_ts=data.get("playtimer_start_ts"),
            is_starter=bool(data.get("is_starter", False)),
            subbed_on_count=int(data.get("subbed_on_count", 0)),
            subbed_off_count=int(data.get("subbed_off_count", 0)),
        )


@dataclass(frozen=True)
class GameEvent:
    """
    Immutable entry of a game's event log.

    Goals carry ``scorer_player_id`` / ``assist_player_id``; substitutions
    carry ``player_in_id`` and/or ``player_out_id``.
    """
    id: str
    type: EventType
    team: Side
    timestamp: float
    game_seconds: int
    scorer_player_id: Optional[str] = None
    assist_player_id: Optional[str] = None
    player_in_id: Optional[str] = None
    player_out_id: Optional[str] = None

    @property
    def is_goal(self) -> bool:
        return self.type is EventType.GOAL

    @property
    def is_substitution(self) -> bool:
        return self.type is EventType.SUBSTITUTION

    def references(self, player_id: str) -> bool:
        return player_id in (
            self.scorer_player_id, self.assist_player_id,
            self.player_in_id, self.player_out_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "team": self.team.value,
            "timestamp": self.timestamp,
            "game_seconds": self.game_seconds,
            "scorer_player_id": self.scorer_player_id,
            "assist_player_id": self.assist_player_id,
            "player_in_id": self.player_in_id,
            "player_out_id": self.player_out_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameEvent":
        return cls(
            id=data["id"],
            type=EventType(data["type"]),
            team=Side(data["team"]),
            timestamp=float(data["timestamp"]),
            game_seconds=int(data["game_seconds"]),
            scorer_player_id=data.get("scorer_player_id"),
            assist_player_id=data.get("assist_player_id"),
            player_in_id=data.get("player_in_id"),
            player_out_id=data.get("player_out_id"),
        )


@dataclass
class Game:
    """
    One match session.

    Attributes:
        id: Stable identifier of the session
        team_id: Team owning the session
        opponent: Opponent name
        date: Match date (YYYY-MM-DD)
        time: Kickoff time (HH:MM), empty when unknown
        location: Whether our team plays at home or away
        season: Free-text season label
        competition: Free-text competition label
        home_score: Goals for the home side (derived from events)
        away_score: Goals for the away side (derived from events)
        timer_status: Stopped or running
        timer_start_ts: When the clock was last started, only while running
        timer_elapsed_seconds: Seconds accumulated by completed running intervals
        is_finished: Terminal flag, set only by the finish transition
        lineup: One state per player known to the session
        events: Append-ordered event log
        storage_class: Store owning the authoritative copy
    """
    id: str
    team_id: str = ""
    opponent: str = ""
    date: str = ""
    time: str = ""
    location: Side = Side.HOME
    season: str = ""
    competition: str = ""
    home_score: int = 0
    away_score: int = 0
    timer_status: TimerStatus = TimerStatus.STOPPED
    timer_start_ts: Optional[float] = None
    timer_elapsed_seconds: int = 0
    is_finished: bool = False
    lineup: List[PlayerLineupState] = field(default_factory=list)
    events: List[GameEvent] = field(default_factory=list)
    storage_class: StorageClass = StorageClass.VOLATILE

    @property
    def is_running(self) -> bool:
        return self.timer_status is TimerStatus.RUNNING

    @property
    def is_durable(self) -> bool:
        return self.storage_class is StorageClass.DURABLE

    def our_side(self) -> Side:
        """The scoreline side our team occupies."""
        return self.location

    def get_player_state(self, player_id: str) -> Optional[PlayerLineupState]:
        for state in self.lineup:
            if state.player_id == player_id:
                return state
        return None

    def players_at(self, location: Location) -> List[PlayerLineupState]:
        return [state for state in self.lineup if state.location is location]

    def score_for(self, side: Side) -> int:
        return self.home_score if side is Side.HOME else self.away_score

    def set_score(self, side: Side, value: int) -> None:
        if side is Side.HOME:
            self.home_score = max(0, value)
        else:
            self.away_score = max(0, value)

    def copy(self) -> "Game":
        """Deep copy, used for snapshots and rollback."""
        return copy.deepcopy(self)

    def to_json(self) -> Dict[str, Any]:
        """
        Convert Game to a JSON-serializable dictionary.

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        return {
            "id": self.id,
            "team_id": self.team_id,
            "opponent": self.opponent,
            "date": self.date,
            "time": self.time,
            "location": self.location.value,
            "season": self.season,
            "competition": self.competition,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "timer_status": self.timer_status.value,
            "timer_start_ts": self.timer_start_ts,
            "timer_elapsed_seconds": self.timer_elapsed_seconds,
            "is_finished": self.is_finished,
            "lineup": [state.to_dict() for state in self.lineup],
            "events": [event.to_dict() for event in self.events],
            "storage_class": self.storage_class.value,
        }

    @staticmethod
    def from_json(data: Dict[str, Any]) -> "Game":
        """
        Create a Game from a well-formed JSON dictionary.

        Stored data of unknown quality goes through the reconciliation
        validator instead, which repairs or drops malformed records.
        """
        return Game(
            id=data["id"],
            team_id=data.get("team_id", ""),
            opponent=data.get("opponent", ""),
            date=data.get("date", ""),
            time=data.get("time") or "",
            location=Side(data.get("location", SIDE_HOME)),
            season=data.get("season") or "",
            competition=data.get("competition") or "",
            home_score=int(data.get("home_score", 0)),
            away_score=int(data.get("away_score", 0)),
            timer_status=TimerStatus(data.get("timer_status", TimerStatus.STOPPED.value)),
            timer_start_ts=data.get("timer_start_ts"),
            timer_elapsed_seconds=int(data.get("timer_elapsed_seconds", 0)),
            is_finished=bool(data.get("is_finished", False)),
            lineup=[PlayerLineupState.from_dict(p) for p in data.get("lineup") or []],
            events=[GameEvent.from_dict(e) for e in data.get("events") or []],
            storage_class=StorageClass(data.get("storage_class", StorageClass.VOLATILE.value)),
        )
