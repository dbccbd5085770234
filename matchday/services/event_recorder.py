"""
Event log and score bookkeeping for the match-day tracker.

The log is append-only during play. The only removal is "undo the last goal
for a side", which also decrements that side's score.
"""
import uuid
from typing import Dict, Iterable, List, Optional, Tuple

from ..models import EventType, Game, GameEvent, Side, SubstitutionRecord
from ..utils import now_ts, get_logger
from .clock_service import elapsed_seconds
from .guards import ensure_editable

logger = get_logger(__name__)


def new_event_id() -> str:
    return str(uuid.uuid4())


def add_goal(
    game: Game,
    team: Side,
    scorer_id: Optional[str] = None,
    assist_id: Optional[str] = None,
    now: Optional[float] = None,
) -> GameEvent:
    """
    Append a goal and increment the matching score.

    Args:
        game: Game to record into
        team: Side that scored
        scorer_id: Scoring player, None for opponent goals or unknown scorer
        assist_id: Assisting player, optional
        now: Wall-clock instant of the goal

    Returns:
        The appended event
    """
    ensure_editable(game)
    current = now if now is not None else now_ts()
    event = GameEvent(
        id=new_event_id(),
        type=EventType.GOAL,
        team=team,
        timestamp=current,
        game_seconds=elapsed_seconds(game, current),
        scorer_player_id=scorer_id,
        assist_player_id=assist_id,
    )
    game.events.append(event)
    game.set_score(team, game.score_for(team) + 1)
    logger.debug("Goal for %s in game %s at %ss", team.value, game.id, event.game_seconds)
    return event


def remove_last_goal(game: Game, team: Side) -> Optional[GameEvent]:
    """
    Remove the most recent goal for ``team`` and decrement its score.

    Returns:
        The removed event, or None when the side has no goals logged
    """
    ensure_editable(game)
    for index in range(len(game.events) - 1, -1, -1):
        event = game.events[index]
        if event.is_goal and event.team is team:
            del game.events[index]
            game.set_score(team, game.score_for(team) - 1)
            logger.debug("Removed goal %s for %s in game %s", event.id, team.value, game.id)
            return event
    return None


def record_substitution(
    game: Game,
    player_in_id: Optional[str] = None,
    player_out_id: Optional[str] = None,
    now: Optional[float] = None,
) -> GameEvent:
    """Append one side of a substitution for our team."""
    current = now if now is not None else now_ts()
    event = GameEvent(
        id=new_event_id(),
        type=EventType.SUBSTITUTION,
        team=game.our_side(),
        timestamp=current,
        game_seconds=elapsed_seconds(game, current),
        player_in_id=player_in_id,
        player_out_id=player_out_id,
    )
    game.events.append(event)
    return event


def sorted_events(events: Iterable[GameEvent]) -> List[GameEvent]:
    """Events ordered by match second, ties broken by wall-clock timestamp."""
    return sorted(events, key=lambda e: (e.game_seconds, e.timestamp))


def count_goals(events: Iterable[GameEvent]) -> Dict[Side, int]:
    counts = {Side.HOME: 0, Side.AWAY: 0}
    for event in events:
        if event.is_goal:
            counts[event.team] += 1
    return counts


def recompute_scores(game: Game) -> bool:
    """
    Repair the stored scores from the goal events.

    Returns:
        True if either stored score disagreed with the log
    """
    counts = count_goals(game.events)
    changed = (game.home_score, game.away_score) != (counts[Side.HOME], counts[Side.AWAY])
    game.home_score = counts[Side.HOME]
    game.away_score = counts[Side.AWAY]
    return changed


def score_at(events: Iterable[GameEvent], game_seconds: int) -> Tuple[int, int]:
    """(home, away) score counting goals up to and including ``game_seconds``."""
    counts = count_goals(e for e in events if e.game_seconds <= game_seconds)
    return counts[Side.HOME], counts[Side.AWAY]


def pair_substitutions(events: Iterable[GameEvent]) -> List[SubstitutionRecord]:
    """
    Collapse substitution entries into one record per substitution.

    Entries already carrying both players stand alone. One-sided entries of
    the same side and match second are paired in log order: each "in" is
    matched with the first unmatched "out". Entries left over stay
    one-sided records.
    """
    records: List[SubstitutionRecord] = []
    open_records: Dict[Tuple[Side, int], List[SubstitutionRecord]] = {}

    for event in sorted_events(e for e in events if e.is_substitution):
        if event.player_in_id and event.player_out_id:
            records.append(SubstitutionRecord(
                team=event.team.value,
                game_seconds=event.game_seconds,
                timestamp=event.timestamp,
                player_in_id=event.player_in_id,
                player_out_id=event.player_out_id,
            ))
            continue

        key = (event.team, event.game_seconds)
        waiting = open_records.setdefault(key, [])
        match = None
        for candidate in waiting:
            if event.player_in_id and candidate.player_in_id is None:
                match = candidate
                break
            if event.player_out_id and candidate.player_out_id is None:
                match = candidate
                break

        if match is not None:
            waiting.remove(match)
            if event.player_in_id:
                match.player_in_id = event.player_in_id
            else:
                match.player_out_id = event.player_out_id
            continue

        record = SubstitutionRecord(
            team=event.team.value,
            game_seconds=event.game_seconds,
            timestamp=event.timestamp,
            player_in_id=event.player_in_id,
            player_out_id=event.player_out_id,
        )
        records.append(record)
        waiting.append(record)

    return records
