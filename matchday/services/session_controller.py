"""
Session lifecycle controller for the match-day tracker.

The controller owns the merged collection of games, routes every gameplay
mutation to the engine functions, persists in-progress games to the volatile
store after each change and performs the single volatile-to-durable
transition when a game is finished.
"""
import dataclasses
import functools
import uuid
from typing import Dict, List, Optional, Union

from ..models import (
    FieldPosition, Game, GameEvent, GameHistory, GameSummary, Location, Side,
    StorageClass, SessionState,
)
from ..utils import get_logger, local_date_and_time, now_ts
from .clock_service import (
    clear_running_stints, reset_clock, session_state, start_clock, stop_clock,
)
from .errors import NotFoundError, PersistenceError, ValidationError
from .event_recorder import add_goal, remove_last_goal
from .guards import ensure_editable
from .lineup_service import add_player, create_default_lineup
from .persistence_service import DurableStore, VolatileStore
from .planning_service import PlannedSwap, SubstitutionPlanner
from .reconciliation import GameValidator, cleanup_for_deleted_player, merge_collections, sort_games
from .report_service import build_summary
from .roster_service import Roster
from .substitution_service import move_player, swap_players

logger = get_logger(__name__)

EDITABLE_FIELDS = ("opponent", "date", "time", "location", "season", "competition")


def missing_is_noop(method):
    """Log and swallow ``NotFoundError`` from a controller operation, returning None."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except NotFoundError as e:
            logger.warning("%s ignored: %s", method.__name__, e)
            return None

    return wrapper


def _side(value: Union[Side, str]) -> Side:
    if isinstance(value, Side):
        return value
    try:
        return Side(str(value).lower())
    except ValueError:
        raise ValidationError(f"Unknown side {value!r}, expected home or away")


def _location(value: Union[Location, str]) -> Location:
    if isinstance(value, Location):
        return value
    try:
        return Location(str(value).lower())
    except ValueError:
        raise ValidationError(f"Unknown location {value!r}, expected bench, field or inactive")


class SessionController:
    """
    Orchestrates the games of one team.

    Args:
        team_id: Team whose games are managed
        volatile_store: Local store for in-progress games
        durable_store: Authoritative store for finished games
        roster: Current players; deletions trigger reference cleanup
    """

    def __init__(
        self,
        team_id: str,
        volatile_store: VolatileStore,
        durable_store: DurableStore,
        roster: Optional[Roster] = None,
    ):
        self.team_id = team_id
        self.volatile_store = volatile_store
        self.durable_store = durable_store
        self.roster = roster or Roster()
        self.history: GameHistory = volatile_store.load_history()
        self._games: Dict[str, Game] = {}
        self._planners: Dict[str, SubstitutionPlanner] = {}
        self.roster.subscribe(self.on_player_removed)

    # ------------------------------------------------------------------
    # Loading and reads
    # ------------------------------------------------------------------
    def load(self) -> List[Game]:
        """
        Rebuild the game collection from both stores.

        A failing durable fetch is logged and treated as an empty durable
        collection; malformed records are repaired or dropped.
        """
        roster_ids = set(self.roster.ids()) if len(self.roster) else None
        validator = GameValidator(roster_ids)

        result = self.durable_store.fetch_finished(self.team_id)
        if result.ok:
            durable = validator.validate_all(result.data or [], StorageClass.DURABLE)
        else:
            logger.error("Could not fetch finished games: %s", result.error)
            durable = []
        volatile = validator.validate_all(self.volatile_store.load_all(), StorageClass.VOLATILE)

        self._games = {game.id: game for game in merge_collections(durable, volatile)}
        self._planners.clear()
        logger.info("Loaded %d games (%d finished)", len(self._games), len(durable))
        return self.games

    @property
    def games(self) -> List[Game]:
        return sort_games(self._games.values())

    def get_game(self, game_id: str) -> Optional[Game]:
        return self._games.get(game_id)

    def _game(self, game_id: str) -> Game:
        game = self._games.get(game_id)
        if game is None:
            raise NotFoundError(f"Game {game_id} not found")
        return game

    def session_state(self, game_id: str) -> Optional[SessionState]:
        game = self._games.get(game_id)
        return session_state(game) if game is not None else None

    @missing_is_noop
    def summary(self, game_id: str, now: Optional[float] = None) -> GameSummary:
        return build_summary(self._game(game_id), now)

    def _save_volatile(self) -> None:
        self.volatile_store.save_all([
            game for game in self.games if not game.is_durable and not game.is_finished
        ])

    def _record_history(self, season: Optional[str], competition: Optional[str]) -> None:
        if not season and not competition:
            return
        self.history.record(season, competition)
        self.volatile_store.save_history(self.history)

    # ------------------------------------------------------------------
    # Game management
    # ------------------------------------------------------------------
    def create_game(
        self,
        opponent: str,
        date: str,
        time: str = "",
        location: Union[Side, str] = Side.HOME,
        season: str = "",
        competition: str = "",
    ) -> Game:
        """
        Create a new in-progress game with every roster player on the bench.

        Raises:
            ValidationError: If the opponent or date is missing
        """
        opponent = (opponent or "").strip()
        if not opponent:
            raise ValidationError("An opponent is required")
        if not date:
            raise ValidationError("A date is required")

        game = Game(
            id=str(uuid.uuid4()),
            team_id=self.team_id,
            opponent=opponent,
            date=date,
            time=time or "",
            location=_side(location),
            season=(season or "").strip(),
            competition=(competition or "").strip(),
            lineup=create_default_lineup(self.roster.ids()),
        )
        self._games[game.id] = game
        self._save_volatile()
        self._record_history(game.season, game.competition)
        logger.info("Created game %s against %s on %s", game.id, game.opponent, game.date)
        return game

    @missing_is_noop
    def update_game(self, game_id: str, **fields) -> Game:
        """
        Edit the details of an unfinished game.

        Raises:
            GameFinishedError: If the game is finished
            ValidationError: For unknown fields or an empty opponent
        """
        game = self._game(game_id)
        ensure_editable(game)
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        if "opponent" in fields:
            opponent = (fields["opponent"] or "").strip()
            if not opponent:
                raise ValidationError("An opponent is required")
            game.opponent = opponent
        if "date" in fields and fields["date"]:
            game.date = fields["date"]
        if "time" in fields:
            game.time = fields["time"] or ""
        if "location" in fields:
            game.location = _side(fields["location"])
        if "season" in fields:
            game.season = (fields["season"] or "").strip()
        if "competition" in fields:
            game.competition = (fields["competition"] or "").strip()

        self._save_volatile()
        self._record_history(
            game.season if "season" in fields else None,
            game.competition if "competition" in fields else None,
        )
        return game

    @missing_is_noop
    def delete_game(self, game_id: str) -> bool:
        """
        Delete a game from whichever store owns it.

        Raises:
            PersistenceError: If deleting a finished game from the durable store fails
        """
        game = self._game(game_id)
        if game.is_durable:
            result = self.durable_store.delete_finished(game.id)
            if not result.ok:
                logger.error("Deleting finished game %s failed: %s", game.id, result.error)
                raise PersistenceError(f"Failed to delete game {game.id}: {result.error}")
        del self._games[game.id]
        self._planners.pop(game.id, None)
        self._save_volatile()
        logger.info("Deleted game %s", game.id)
        return True

    @missing_is_noop
    def add_player_to_game(self, game_id: str, player_id: str):
        """
        Add a roster player who is missing from the game's lineup, at the bench.

        Raises:
            GameFinishedError: If the game is finished
        """
        game = self._game(game_id)
        if player_id not in self.roster:
            raise NotFoundError(f"Player {player_id} is not on the roster")
        state = add_player(game, player_id)
        self._save_volatile()
        return state

    # ------------------------------------------------------------------
    # Clock and lifecycle
    # ------------------------------------------------------------------
    @missing_is_noop
    def start(self, game_id: str, now: Optional[float] = None) -> Game:
        """
        Start or resume the clock.

        Only kickoff sets the game's date and time to the moment of the start;
        resuming after a pause keeps the kickoff date. Starting a running game
        changes nothing.
        """
        game = self._game(game_id)
        ensure_editable(game)
        if game.is_running:
            return game
        current = now if now is not None else now_ts()
        if start_clock(game, current):
            game.date, game.time = local_date_and_time(current)
            logger.info("Game %s kicked off", game.id)
        else:
            logger.info("Game %s resumed", game.id)
        self._save_volatile()
        return game

    @missing_is_noop
    def stop(self, game_id: str, now: Optional[float] = None) -> Game:
        game = self._game(game_id)
        elapsed = stop_clock(game, now)
        logger.info("Game %s paused at %ss", game.id, elapsed)
        self._save_volatile()
        return game

    @missing_is_noop
    def finish(self, game_id: str, now: Optional[float] = None) -> Game:
        """
        Finish a game and hand it to the durable store.

        If the durable write fails the game is restored exactly as it was
        before the call and stays in the volatile store.

        Raises:
            GameFinishedError: If the game is already finished
            PersistenceError: If the durable write fails
        """
        game = self._game(game_id)
        ensure_editable(game)
        before = game.copy()

        if game.is_running:
            stop_clock(game, now)
        clear_running_stints(game)
        game.is_finished = True
        game.storage_class = StorageClass.DURABLE

        result = self.durable_store.upsert_finished(game)
        if not result.ok:
            for item in dataclasses.fields(Game):
                setattr(game, item.name, getattr(before, item.name))
            logger.error("Finishing game %s failed, game left in progress: %s", game_id, result.error)
            raise PersistenceError(f"Failed to save finished game {game_id}: {result.error}")

        self._planners.pop(game_id, None)
        self._save_volatile()
        logger.info("Game %s finished %d-%d", game_id, game.home_score, game.away_score)
        return game

    @missing_is_noop
    def reset(self, game_id: str) -> Game:
        """
        Return an unfinished game to its not-started state.

        The lineup goes back to all-bench with zero counters, scores are zeroed
        and the event log is emptied.
        """
        game = self._game(game_id)
        ensure_editable(game)
        game.lineup = create_default_lineup(state.player_id for state in game.lineup)
        game.events = []
        game.home_score = 0
        game.away_score = 0
        reset_clock(game)
        self._planners.pop(game_id, None)
        self._save_volatile()
        logger.info("Game %s reset", game_id)
        return game

    # ------------------------------------------------------------------
    # Gameplay
    # ------------------------------------------------------------------
    @missing_is_noop
    def move_player(
        self,
        game_id: str,
        player_id: str,
        to_location: Union[Location, str],
        position: Optional[FieldPosition] = None,
        from_location: Optional[Union[Location, str]] = None,
        now: Optional[float] = None,
    ) -> Optional[GameEvent]:
        game = self._game(game_id)
        source = _location(from_location) if from_location is not None else None
        event = move_player(game, player_id, source, _location(to_location), position, now=now)
        self._save_volatile()
        return event

    @missing_is_noop
    def swap_players(
        self,
        game_id: str,
        incoming_id: str,
        outgoing_id: str,
        now: Optional[float] = None,
    ) -> List[GameEvent]:
        game = self._game(game_id)
        events = swap_players(game, incoming_id, outgoing_id, now=now)
        self._save_volatile()
        return events

    @missing_is_noop
    def add_goal(
        self,
        game_id: str,
        team: Union[Side, str],
        scorer_id: Optional[str] = None,
        assist_id: Optional[str] = None,
        now: Optional[float] = None,
    ) -> GameEvent:
        game = self._game(game_id)
        event = add_goal(game, _side(team), scorer_id, assist_id, now=now)
        self._save_volatile()
        return event

    @missing_is_noop
    def remove_last_goal(self, game_id: str, team: Union[Side, str]) -> Optional[GameEvent]:
        game = self._game(game_id)
        event = remove_last_goal(game, _side(team))
        if event is not None:
            self._save_volatile()
        return event

    # ------------------------------------------------------------------
    # Substitution planning
    # ------------------------------------------------------------------
    def _planner(self, game: Game) -> SubstitutionPlanner:
        planner = self._planners.get(game.id)
        if planner is None or planner.game is not game:
            planner = SubstitutionPlanner(game)
            self._planners[game.id] = planner
        return planner

    @missing_is_noop
    def begin_plan(self, game_id: str) -> SubstitutionPlanner:
        """Return the game's planner, creating an empty one if needed."""
        return self._planner(self._game(game_id))

    def planner_for(self, game_id: str) -> Optional[SubstitutionPlanner]:
        return self._planners.get(game_id)

    @missing_is_noop
    def stage_substitution(
        self,
        game_id: str,
        bench_player_id: str,
        target_field_player_id: str,
        target_position: Optional[FieldPosition] = None,
    ) -> PlannedSwap:
        planner = self._planner(self._game(game_id))
        return planner.stage(bench_player_id, target_field_player_id, target_position)

    @missing_is_noop
    def commit_plan(self, game_id: str, now: Optional[float] = None) -> List[GameEvent]:
        """
        Apply the staged substitutions of a game in one step.

        Raises:
            GameFinishedError: If the game was finished meanwhile
        """
        self._game(game_id)
        planner = self._planners.get(game_id)
        if planner is None:
            return []
        events = planner.commit(now)
        del self._planners[game_id]
        self._save_volatile()
        return events

    def cancel_plan(self, game_id: str) -> bool:
        planner = self._planners.pop(game_id, None)
        if planner is None:
            return False
        planner.cancel()
        return True

    # ------------------------------------------------------------------
    # Roster notifications
    # ------------------------------------------------------------------
    def on_player_removed(self, player_id: str) -> None:
        """
        Remove a deleted player from every game and pending plan.

        In-progress games are saved to the volatile store. Finished games are
        only updated in memory.
        """
        changed_volatile = False
        changed = 0
        for game in self._games.values():
            if cleanup_for_deleted_player(game, player_id):
                changed += 1
                if not game.is_durable:
                    changed_volatile = True

        for planner in self._planners.values():
            for swap in planner.pending:
                if player_id in (swap.bench_player_id, swap.target_field_player_id):
                    planner.unstage(swap.bench_player_id)

        if changed_volatile:
            self._save_volatile()
        logger.info("Removed player %s from %d game(s)", player_id, changed)
