"""Per-player counters and game summaries built from a game's lineup and event log."""

from typing import Dict, List, Optional

from ..models import Game, GameSummary, PlayerStatLine
from ..utils import now_ts
from .clock_service import current_playtime_seconds, elapsed_seconds
from .event_recorder import pair_substitutions
from .lineup_service import starting_lineup


def player_stat_lines(game: Game, now: Optional[float] = None) -> List[PlayerStatLine]:
    """
    Raw counters for every player in the game's lineup.

    Args:
        game: Game to summarise
        now: Instant used for running stints

    Returns:
        One line per lineup entry, in lineup order
    """
    current = now if now is not None else now_ts()
    goals: Dict[str, int] = {}
    assists: Dict[str, int] = {}
    for event in game.events:
        if not event.is_goal:
            continue
        if event.scorer_player_id:
            goals[event.scorer_player_id] = goals.get(event.scorer_player_id, 0) + 1
        if event.assist_player_id:
            assists[event.assist_player_id] = assists.get(event.assist_player_id, 0) + 1

    return [
        PlayerStatLine(
            player_id=state.player_id,
            goals=goals.get(state.player_id, 0),
            assists=assists.get(state.player_id, 0),
            playtime_seconds=current_playtime_seconds(state, current),
            is_starter=state.is_starter,
            starting_position=state.initial_position,
            subbed_on_count=state.subbed_on_count,
            subbed_off_count=state.subbed_off_count,
        )
        for state in game.lineup
    ]


def build_summary(game: Game, now: Optional[float] = None) -> GameSummary:
    current = now if now is not None else now_ts()
    return GameSummary(
        game_id=game.id,
        elapsed_seconds=elapsed_seconds(game, current),
        home_score=game.home_score,
        away_score=game.away_score,
        players=player_stat_lines(game, current),
        substitutions=pair_substitutions(game.events),
        starting_lineup=[state.player_id for state in starting_lineup(game)],
    )
