"""
Services package for the match-day tracker.

This package contains the session engine (clock, playtime, substitutions,
events, planning), reconciliation of stored games, the storage collaborators
and the services built on top of them.
"""
from .errors import (
    MatchdayError, ValidationError, NotFoundError, PersistenceError,
    ConflictError, GameFinishedError, StoreResult,
)
from .clock_service import (
    elapsed_seconds, current_playtime_seconds, start_clock, stop_clock, session_state,
)
from .event_recorder import (
    add_goal, remove_last_goal, sorted_events, score_at, pair_substitutions, recompute_scores,
)
from .substitution_service import move_player, swap_players
from .planning_service import PlannedSwap, SubstitutionPlanner
from .lineup_service import create_default_lineup, drop_player, location_counts, starting_lineup
from .reconciliation import GameValidator, merge_collections, sort_games, cleanup_for_deleted_player
from .persistence_service import (
    VolatileStore, DurableStore, FileDurableStore, HttpDurableStore, create_durable_store,
)
from .roster_service import Roster
from .lineup_templates import LineupDraft, SavedLineupService
from .report_service import player_stat_lines, build_summary
from .session_controller import SessionController
from .service_factory import ServiceFactory

__all__ = [
    "MatchdayError", "ValidationError", "NotFoundError", "PersistenceError",
    "ConflictError", "GameFinishedError", "StoreResult",
    "elapsed_seconds", "current_playtime_seconds", "start_clock", "stop_clock", "session_state",
    "add_goal", "remove_last_goal", "sorted_events", "score_at", "pair_substitutions",
    "recompute_scores", "move_player", "swap_players", "PlannedSwap", "SubstitutionPlanner",
    "create_default_lineup", "drop_player", "location_counts", "starting_lineup",
    "GameValidator", "merge_collections", "sort_games", "cleanup_for_deleted_player",
    "VolatileStore", "DurableStore", "FileDurableStore", "HttpDurableStore", "create_durable_store",
    "Roster", "LineupDraft", "SavedLineupService", "player_stat_lines", "build_summary",
    "SessionController", "ServiceFactory",
]
