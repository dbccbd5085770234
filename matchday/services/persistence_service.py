"""
Storage collaborators for the match-day tracker.

The volatile store keeps in-progress games in a local JSON file per team. It
is assumed always available: read problems are logged and treated as an
empty collection. The durable store owns finished games and lineup
templates; every durable operation reports its outcome as a ``StoreResult``
instead of raising.
"""
import json
import os
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

from ..config import AppSettings
from ..models import Game, GameHistory, SavedLineup
from ..utils import get_logger
from ..utils.constants import (
    ACTIVE_GAMES_FILE, DURABLE_DIR, DURABLE_GAMES_DIR, DURABLE_TEMPLATES_DIR, HISTORY_FILE,
)
from .errors import StoreResult

logger = get_logger(__name__)


def _write_json(path: Path, payload: Any) -> None:
    """Write JSON next to ``path`` and move it into place."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
    os.replace(tmp_path, path)


def _read_json(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


class VolatileStore:
    """
    Fast local store for games that are not finished yet.

    Args:
        data_dir: Root data directory
        team_id: Team whose games this store holds
    """

    def __init__(self, data_dir: str, team_id: str):
        self.team_id = team_id
        self.team_dir = Path(data_dir) / team_id
        self.games_path = self.team_dir / ACTIVE_GAMES_FILE
        self.history_path = self.team_dir / HISTORY_FILE

    def load_all(self) -> List[Dict[str, Any]]:
        """
        Load the raw records of every in-progress game.

        Returns:
            List of game dictionaries, empty on any read problem
        """
        if not self.games_path.exists():
            return []
        try:
            data = _read_json(self.games_path)
        except (OSError, ValueError) as e:
            logger.warning("Could not read active games from %s: %s", self.games_path, e)
            return []
        if not isinstance(data, list):
            logger.warning("Active games file %s does not hold a list, ignoring it", self.games_path)
            return []
        return data

    def save_all(self, games: List[Game]) -> None:
        """Replace the stored collection with ``games``."""
        try:
            _write_json(self.games_path, [game.to_json() for game in games])
        except (OSError, TypeError) as e:
            logger.warning("Could not write active games to %s: %s", self.games_path, e)

    def load_history(self) -> GameHistory:
        if not self.history_path.exists():
            return GameHistory()
        try:
            return GameHistory.from_dict(_read_json(self.history_path))
        except (OSError, ValueError) as e:
            logger.warning("Could not read game history from %s: %s", self.history_path, e)
            return GameHistory()

    def save_history(self, history: GameHistory) -> None:
        try:
            _write_json(self.history_path, history.to_dict())
        except OSError as e:
            logger.warning("Could not write game history to %s: %s", self.history_path, e)


class DurableStore(ABC):
    """Authoritative store for finished games and lineup templates."""

    @abstractmethod
    def fetch_finished(self, team_id: str) -> StoreResult:
        """Raw records of every finished game of the team (``data``: list of dicts)."""
        pass

    @abstractmethod
    def upsert_finished(self, game: Game) -> StoreResult:
        """Write a finished game with its full lineup and event log."""
        pass

    @abstractmethod
    def delete_finished(self, game_id: str) -> StoreResult:
        pass

    @abstractmethod
    def fetch_templates(self, team_id: str) -> StoreResult:
        """Saved lineups of the team (``data``: list of SavedLineup)."""
        pass

    @abstractmethod
    def upsert_template(self, lineup: SavedLineup) -> StoreResult:
        """Insert or replace by (team, name); ``data`` is the stored SavedLineup."""
        pass

    @abstractmethod
    def delete_template(self, template_id: str) -> StoreResult:
        pass


class FileDurableStore(DurableStore):
    """
    Durable store backed by one JSON document per record.

    Layout: ``<data_dir>/<team>/durable/games/<id>.json`` and
    ``<data_dir>/<team>/durable/lineups/<id>.json``.
    """

    def __init__(self, data_dir: str):
        self.data_dir = Path(data_dir)

    def _games_dir(self, team_id: str) -> Path:
        return self.data_dir / team_id / DURABLE_DIR / DURABLE_GAMES_DIR

    def _templates_dir(self, team_id: str) -> Path:
        return self.data_dir / team_id / DURABLE_DIR / DURABLE_TEMPLATES_DIR

    def _find(self, pattern: str) -> List[Path]:
        return list(self.data_dir.glob(f"*/{DURABLE_DIR}/{pattern}"))

    def fetch_finished(self, team_id: str) -> StoreResult:
        directory = self._games_dir(team_id)
        records = []
        try:
            for path in sorted(directory.glob("*.json")):
                try:
                    records.append(_read_json(path))
                except ValueError as e:
                    logger.warning("Skipping unreadable finished game %s: %s", path, e)
        except OSError as e:
            return StoreResult.failure(f"Could not list finished games: {e}")
        return StoreResult.success(records)

    def upsert_finished(self, game: Game) -> StoreResult:
        try:
            _write_json(self._games_dir(game.team_id) / f"{game.id}.json", game.to_json())
        except (OSError, TypeError) as e:
            return StoreResult.failure(f"Could not write finished game {game.id}: {e}")
        return StoreResult.success()

    def delete_finished(self, game_id: str) -> StoreResult:
        try:
            for path in self._find(f"{DURABLE_GAMES_DIR}/{game_id}.json"):
                path.unlink()
        except OSError as e:
            return StoreResult.failure(f"Could not delete finished game {game_id}: {e}")
        return StoreResult.success()

    def fetch_templates(self, team_id: str) -> StoreResult:
        lineups = []
        try:
            for path in sorted(self._templates_dir(team_id).glob("*.json")):
                try:
                    lineups.append(SavedLineup.from_dict(_read_json(path)))
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning("Skipping unreadable saved lineup %s: %s", path, e)
        except OSError as e:
            return StoreResult.failure(f"Could not list saved lineups: {e}")
        return StoreResult.success(lineups)

    def upsert_template(self, lineup: SavedLineup) -> StoreResult:
        existing = self.fetch_templates(lineup.team_id)
        if not existing.ok:
            return existing

        template_id = lineup.id or str(uuid.uuid4())
        for other in existing.data:
            if other.name == lineup.name:
                template_id = other.id
                break

        stored = SavedLineup(id=template_id, team_id=lineup.team_id, name=lineup.name, slots=list(lineup.slots))
        try:
            _write_json(self._templates_dir(lineup.team_id) / f"{template_id}.json", stored.to_dict())
        except OSError as e:
            return StoreResult.failure(f"Could not write saved lineup {lineup.name!r}: {e}")
        return StoreResult.success(stored)

    def delete_template(self, template_id: str) -> StoreResult:
        try:
            for path in self._find(f"{DURABLE_TEMPLATES_DIR}/{template_id}.json"):
                path.unlink()
        except OSError as e:
            return StoreResult.failure(f"Could not delete saved lineup {template_id}: {e}")
        return StoreResult.success()


def _iso_from_ts(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def _ts_from_iso(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()
    except ValueError:
        return None


def game_to_rows(game: Game) -> Dict[str, Any]:
    """Split a finished game into its ``games``, ``game_lineups`` and ``game_events`` rows."""
    game_row = {
        "id": game.id,
        "team_id": game.team_id,
        "opponent": game.opponent,
        "game_date": game.date,
        "game_time": game.time or None,
        "location": game.location.value,
        "season": game.season or None,
        "competition": game.competition or None,
        "home_score": game.home_score,
        "away_score": game.away_score,
        "timer_status": "stopped",
        "timer_elapsed": game.timer_elapsed_seconds,
        "is_explicitly_finished": True,
    }
    lineup_rows = [
        {
            "game_id": game.id,
            "player_id": state.player_id,
            "location": state.location.value,
            "position": state.position.to_dict() if state.position else None,
            "initial_position": state.initial_position.to_dict() if state.initial_position else None,
            "playtime_seconds": state.playtime_seconds,
            "playtimer_start_time": None,
            "is_starter": state.is_starter,
            "subbed_on_count": state.subbed_on_count,
            "subbed_off_count": state.subbed_off_count,
        }
        for state in game.lineup
    ]
    event_rows = [
        {
            "id": event.id,
            "game_id": game.id,
            "type": event.type.value,
            "team": event.team.value,
            "scorer_player_id": event.scorer_player_id,
            "assist_player_id": event.assist_player_id,
            "player_in_id": event.player_in_id,
            "player_out_id": event.player_out_id,
            "event_timestamp": _iso_from_ts(event.timestamp),
            "game_seconds": event.game_seconds,
        }
        for event in game.events
    ]
    return {"game": game_row, "lineup": lineup_rows, "events": event_rows}


def game_record_from_row(row: Dict[str, Any]) -> Dict[str, Any]:
    """Map a ``games`` row with nested lineup and event rows to a game record."""
    return {
        "id": row.get("id"),
        "team_id": row.get("team_id", ""),
        "opponent": row.get("opponent"),
        "date": row.get("game_date"),
        "time": row.get("game_time") or "",
        "location": row.get("location"),
        "season": row.get("season") or "",
        "competition": row.get("competition") or "",
        "home_score": row.get("home_score"),
        "away_score": row.get("away_score"),
        "timer_status": row.get("timer_status"),
        "timer_start_ts": None,
        "timer_elapsed_seconds": row.get("timer_elapsed"),
        "is_finished": row.get("is_explicitly_finished"),
        "storage_class": "durable",
        "lineup": [
            {
                "player_id": lu.get("player_id"),
                "location": lu.get("location"),
                "position": lu.get("position"),
                "initial_position": lu.get("initial_position"),
                "playtime_seconds": lu.get("playtime_seconds"),
                "playtimer_start_ts": None,
                "is_starter": lu.get("is_starter"),
                "subbed_on_count": lu.get("subbed_on_count"),
                "subbed_off_count": lu.get("subbed_off_count"),
            }
            for lu in row.get("game_lineups") or []
        ],
        "events": [
            {
                "id": ev.get("id"),
                "type": ev.get("type"),
                "team": ev.get("team"),
                "timestamp": _ts_from_iso(ev.get("event_timestamp")),
                "game_seconds": ev.get("game_seconds"),
                "scorer_player_id": ev.get("scorer_player_id"),
                "assist_player_id": ev.get("assist_player_id"),
                "player_in_id": ev.get("player_in_id"),
                "player_out_id": ev.get("player_out_id"),
            }
            for ev in row.get("game_events") or []
        ],
    }


def template_to_row(lineup: SavedLineup) -> Dict[str, Any]:
    return {
        "team_id": lineup.team_id,
        "name": lineup.name,
        "lineup_data": [
            {
                "id": slot.player_id,
                "location": slot.location.value,
                "position": slot.position.to_dict() if slot.position else None,
            }
            for slot in lineup.slots
        ],
    }


def template_from_row(row: Dict[str, Any]) -> SavedLineup:
    return SavedLineup.from_dict({
        "id": row["id"],
        "team_id": row.get("team_id", ""),
        "name": row["name"],
        "slots": [
            {"player_id": p["id"], "location": p.get("location"), "position": p.get("position")}
            for p in row.get("lineup_data") or []
        ],
    })


class HttpDurableStore(DurableStore):
    """
    Durable store talking to a REST backend over HTTP.

    Resources follow a table-per-collection layout (``games``,
    ``game_lineups``, ``game_events``, ``saved_lineups``) filtered with
    ``column=eq.value`` query parameters.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if api_key:
            self.session.headers.update({"apikey": api_key, "Authorization": f"Bearer {api_key}"})

    def _request(
        self,
        method: str,
        resource: str,
        params: Optional[Dict[str, str]] = None,
        payload: Any = None,
        prefer: Optional[str] = None,
    ) -> StoreResult:
        headers = {"Prefer": prefer} if prefer else None
        try:
            response = self.session.request(
                method,
                f"{self.base_url}/{resource}",
                params=params,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json() if response.content else None
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, resource, e)
            return StoreResult.failure(str(e))
        except ValueError as e:
            logger.error("%s %s returned invalid JSON: %s", method, resource, e)
            return StoreResult.failure(f"Invalid response body: {e}")
        return StoreResult.success(data)

    def fetch_finished(self, team_id: str) -> StoreResult:
        result = self._request("GET", "games", params={
            "team_id": f"eq.{team_id}",
            "select": "*,game_lineups(*),game_events(*)",
            "order": "game_date.desc,game_time.desc",
        })
        if not result.ok:
            return result
        return StoreResult.success([game_record_from_row(row) for row in result.data or []])

    def upsert_finished(self, game: Game) -> StoreResult:
        rows = game_to_rows(game)
        steps = [
            ("POST", "games", None, rows["game"], "resolution=merge-duplicates"),
            ("DELETE", "game_lineups", {"game_id": f"eq.{game.id}"}, None, None),
            ("DELETE", "game_events", {"game_id": f"eq.{game.id}"}, None, None),
        ]
        if rows["lineup"]:
            steps.append(("POST", "game_lineups", None, rows["lineup"], None))
        if rows["events"]:
            steps.append(("POST", "game_events", None, rows["events"], None))

        for method, resource, params, payload, prefer in steps:
            result = self._request(method, resource, params=params, payload=payload, prefer=prefer)
            if not result.ok:
                return result
        return StoreResult.success()

    def delete_finished(self, game_id: str) -> StoreResult:
        return self._request("DELETE", "games", params={"id": f"eq.{game_id}"})

    def fetch_templates(self, team_id: str) -> StoreResult:
        result = self._request("GET", "saved_lineups", params={"team_id": f"eq.{team_id}"})
        if not result.ok:
            return result
        lineups = []
        for row in result.data or []:
            try:
                lineups.append(template_from_row(row))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning("Skipping malformed saved lineup row %r: %s", row.get("id"), e)
        return StoreResult.success(lineups)

    def upsert_template(self, lineup: SavedLineup) -> StoreResult:
        result = self._request(
            "POST", "saved_lineups",
            params={"on_conflict": "team_id,name"},
            payload=template_to_row(lineup),
            prefer="resolution=merge-duplicates,return=representation",
        )
        if not result.ok:
            return result
        rows = result.data or []
        if not rows:
            return StoreResult.failure(f"Saving lineup {lineup.name!r} returned no row")
        try:
            return StoreResult.success(template_from_row(rows[0]))
        except (KeyError, ValueError, TypeError) as e:
            return StoreResult.failure(f"Saved lineup row is malformed: {e}")

    def delete_template(self, template_id: str) -> StoreResult:
        return self._request("DELETE", "saved_lineups", params={"id": f"eq.{template_id}"})


def create_durable_store(settings: AppSettings) -> DurableStore:
    """Build the durable store configured in ``settings``."""
    if settings.DURABLE_BACKEND == "http":
        return HttpDurableStore(
            settings.DURABLE_URL,
            api_key=settings.DURABLE_API_KEY,
            timeout=settings.HTTP_TIMEOUT_S,
        )
    return FileDurableStore(settings.DATA_DIR)
