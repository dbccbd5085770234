"""
Reconciliation of stored games.

Stored records are checked field by field on load: anything repairable is
repaired to a safe default, anything else is dropped with a warning. The
validated volatile and durable collections are then merged into the single
list the rest of the tracker works on.
"""
import math
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Set

from ..models import (
    EventType, FieldPosition, Game, GameEvent, Location, PlayerLineupState,
    Side, StorageClass, TimerStatus,
)
from ..utils import get_logger
from ..utils.constants import MAX_COORDINATE, MIN_COORDINATE
from .event_recorder import recompute_scores
from .lineup_service import drop_player

logger = get_logger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _text(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) else default


def _count(value: Any) -> int:
    return max(0, int(value)) if _is_number(value) else 0


def _records(raw: Dict[str, Any], key: str, game_id: str) -> List[Any]:
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning("Game %s has a %s of type %s instead of a list, ignoring it",
                       game_id, key, type(value).__name__)
        return []
    return value


def _enum(enum_cls, value, default):
    try:
        return enum_cls(value)
    except ValueError:
        return default


def _clamp(value: float) -> float:
    return min(MAX_COORDINATE, max(MIN_COORDINATE, float(value)))


def _position(value: Any) -> Optional[FieldPosition]:
    if not isinstance(value, dict) or not _is_number(value.get("x")) or not _is_number(value.get("y")):
        return None
    return FieldPosition(x=_clamp(value["x"]), y=_clamp(value["y"]))


class GameValidator:
    """
    Repairs or drops malformed game records.

    Args:
        roster_ids: Player ids currently on the roster. Lineup entries and
            event references to other players are treated as dangling. When
            None, references are not checked.
    """

    def __init__(self, roster_ids: Optional[Set[str]] = None):
        self.roster_ids = roster_ids

    def _known(self, player_id: Any) -> bool:
        if not isinstance(player_id, str) or not player_id:
            return False
        return self.roster_ids is None or player_id in self.roster_ids

    def _reference(self, game_id: str, event_id: str, player_id: Any) -> Optional[str]:
        if player_id is None:
            return None
        if self._known(player_id):
            return player_id
        logger.warning("Event %s in game %s references unknown player %r, clearing it", event_id, game_id, player_id)
        return None

    def validate_lineup_entry(self, game_id: str, raw: Any, running: bool) -> Optional[PlayerLineupState]:
        if not isinstance(raw, dict) or not self._known(raw.get("player_id")):
            logger.warning("Dropping invalid lineup entry in game %s: %r", game_id, raw)
            return None

        player_id = raw["player_id"]
        location = _enum(Location, raw.get("location"), None)
        if location is None:
            logger.warning("Player %s in game %s has unknown location %r, moving to bench",
                           player_id, game_id, raw.get("location"))
            location = Location.BENCH

        position = _position(raw.get("position"))
        if location is Location.FIELD and position is None:
            logger.warning("Player %s in game %s is on the field without a position, moving to bench",
                           player_id, game_id)
            location = Location.BENCH
        if location is not Location.FIELD:
            position = None

        stint_start = raw.get("playtimer_start_ts")
        if not _is_number(stint_start) or not running or location is Location.BENCH:
            stint_start = None

        return PlayerLineupState(
            player_id=player_id,
            location=location,
            position=position,
            initial_position=_position(raw.get("initial_position")),
            playtime_seconds=_count(raw.get("playtime_seconds")),
            playtimer_start_ts=float(stint_start) if stint_start is not None else None,
            is_starter=raw.get("is_starter") is True,
            subbed_on_count=_count(raw.get("subbed_on_count")),
            subbed_off_count=_count(raw.get("subbed_off_count")),
        )

    def validate_event(self, game_id: str, raw: Any) -> Optional[GameEvent]:
        if (
            not isinstance(raw, dict)
            or not raw.get("id")
            or not _is_number(raw.get("timestamp"))
            or not _is_number(raw.get("game_seconds"))
        ):
            logger.warning("Dropping invalid event in game %s: %r", game_id, raw)
            return None

        event_id = str(raw["id"])
        event_type = _enum(EventType, raw.get("type"), None)
        if event_type is None:
            logger.warning("Dropping event %s in game %s with unknown type %r", event_id, game_id, raw.get("type"))
            return None

        team = _enum(Side, raw.get("team"), None)
        if team is None:
            logger.warning("Event %s in game %s has unknown team %r, using home", event_id, game_id, raw.get("team"))
            team = Side.HOME

        common = dict(
            id=event_id,
            type=event_type,
            team=team,
            timestamp=float(raw["timestamp"]),
            game_seconds=_count(raw["game_seconds"]),
        )
        if event_type is EventType.GOAL:
            return GameEvent(
                scorer_player_id=self._reference(game_id, event_id, raw.get("scorer_player_id")),
                assist_player_id=self._reference(game_id, event_id, raw.get("assist_player_id")),
                **common,
            )

        player_in = self._reference(game_id, event_id, raw.get("player_in_id"))
        player_out = self._reference(game_id, event_id, raw.get("player_out_id"))
        if player_in is None and player_out is None:
            logger.warning("Dropping substitution %s in game %s without participants", event_id, game_id)
            return None
        return GameEvent(player_in_id=player_in, player_out_id=player_out, **common)

    def validate(self, raw: Any, storage_class: StorageClass) -> Optional[Game]:
        """
        Build a Game from a stored record.

        Args:
            raw: Record as read from a store
            storage_class: Store the record was read from

        Returns:
            The repaired game, or None if the record cannot be used
        """
        if not isinstance(raw, dict) or not raw.get("id"):
            logger.warning("Dropping stored game without an id: %r", raw)
            return None

        game_id = str(raw["id"])
        timer_status = _enum(TimerStatus, raw.get("timer_status"), TimerStatus.STOPPED)
        timer_start = raw.get("timer_start_ts")
        if timer_status is TimerStatus.RUNNING and not _is_number(timer_start):
            logger.warning("Game %s is running without a start time, stopping its clock", game_id)
            timer_status = TimerStatus.STOPPED
        is_finished = raw.get("is_finished") is True
        if timer_status is TimerStatus.STOPPED or is_finished or storage_class is StorageClass.DURABLE:
            timer_status = TimerStatus.STOPPED
            timer_start = None
        running = timer_status is TimerStatus.RUNNING

        lineup: List[PlayerLineupState] = []
        seen: Set[str] = set()
        for entry in _records(raw, "lineup", game_id):
            state = self.validate_lineup_entry(game_id, entry, running)
            if state is None:
                continue
            if state.player_id in seen:
                logger.warning("Dropping duplicate lineup entry for %s in game %s", state.player_id, game_id)
                continue
            seen.add(state.player_id)
            lineup.append(state)

        events = [
            event for event in (self.validate_event(game_id, ev) for ev in _records(raw, "events", game_id))
            if event is not None
        ]

        game = Game(
            id=game_id,
            team_id=_text(raw.get("team_id")),
            opponent=_text(raw.get("opponent"), "Unknown"),
            date=_text(raw.get("date")),
            time=_text(raw.get("time")),
            location=_enum(Side, raw.get("location"), Side.HOME),
            season=_text(raw.get("season")),
            competition=_text(raw.get("competition")),
            home_score=_count(raw.get("home_score")),
            away_score=_count(raw.get("away_score")),
            timer_status=timer_status,
            timer_start_ts=float(timer_start) if timer_start is not None else None,
            timer_elapsed_seconds=_count(raw.get("timer_elapsed_seconds")),
            is_finished=is_finished,
            lineup=lineup,
            events=events,
            storage_class=storage_class,
        )
        if recompute_scores(game):
            logger.warning("Repaired stored score of game %s to %d-%d", game_id, game.home_score, game.away_score)
        return game

    def validate_all(self, records: Iterable[Any], storage_class: StorageClass) -> List[Game]:
        games = []
        for raw in records:
            game = self.validate(raw, storage_class)
            if game is not None:
                games.append(game)
        return games


def sort_games(games: Iterable[Game]) -> List[Game]:
    """Newest first: by date, then kickoff time; games without a time come last on their date."""
    return sorted(games, key=lambda g: (g.date, bool(g.time), g.time), reverse=True)


def merge_collections(durable: Iterable[Game], volatile: Iterable[Game]) -> List[Game]:
    """
    Merge finished and in-progress games into one sorted collection.

    Volatile records flagged finished are discarded. For ids present in both
    collections the durable copy wins unless it is not marked finished.
    """
    merged: Dict[str, Game] = {game.id: game for game in durable}
    for game in volatile:
        if game.is_finished:
            logger.warning("Discarding volatile copy of finished game %s", game.id)
            continue
        existing = merged.get(game.id)
        if existing is not None and existing.is_finished:
            logger.debug("Durable copy of game %s supersedes its volatile copy", game.id)
            continue
        merged[game.id] = game
    return sort_games(merged.values())


def cleanup_for_deleted_player(game: Game, player_id: str) -> bool:
    """
    Remove every reference to a deleted player from one game.

    The lineup entry is dropped, goal references are anonymised and
    substitution entries lose that participant; substitutions left without
    any participant are dropped.

    Returns:
        True if the game changed
    """
    changed = drop_player(game, player_id)

    events: List[GameEvent] = []
    for event in game.events:
        if not event.references(player_id):
            events.append(event)
            continue
        changed = True
        if event.is_goal:
            events.append(replace(
                event,
                scorer_player_id=None if event.scorer_player_id == player_id else event.scorer_player_id,
                assist_player_id=None if event.assist_player_id == player_id else event.assist_player_id,
            ))
            continue
        player_in = None if event.player_in_id == player_id else event.player_in_id
        player_out = None if event.player_out_id == player_id else event.player_out_id
        if player_in is None and player_out is None:
            continue
        events.append(replace(event, player_in_id=player_in, player_out_id=player_out))
    game.events = events
    return changed
