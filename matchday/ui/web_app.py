"""
Web application module for the match-day tracker.

This module contains the Flask application exposing the session engine as a
JSON API. Every response uses the ``{"success": ..., ...}`` envelope.
"""
from dataclasses import asdict
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from .. import __version__
from ..config import AppSettings, get_settings
from ..models import FieldPosition, Game, Location, Player
from ..services import (
    GameFinishedError, NotFoundError, PersistenceError, ServiceFactory, ValidationError,
    current_playtime_seconds, elapsed_seconds, location_counts, session_state, sorted_events,
)
from ..utils import APP_TITLE, configure_logging, fmt_mmss, get_logger, now_ts

logger = get_logger(__name__)


class WebAppState:
    """
    State holder for the web application.

    Services are created through the service factory so the API and the
    tests share one wiring.
    """

    def __init__(self, settings: Optional[AppSettings] = None, services: Optional[dict] = None):
        if services is None:
            services = ServiceFactory(settings).create_complete_service_suite()
        self.controller = services['controller']
        self.lineups = services['lineups']
        self.roster = services['roster']
        self.draft = services['draft']


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _position(data: Dict[str, Any]) -> Optional[FieldPosition]:
    raw = data.get("position")
    if raw is None:
        return None
    try:
        return FieldPosition(x=float(raw["x"]), y=float(raw["y"]))
    except (KeyError, TypeError, ValueError):
        raise ValidationError("position must be an object with numeric x and y")


def _not_found(message: str):
    return jsonify({"success": False, "error": message}), 404


def _game_data(game: Game, now: float) -> dict:
    """Stored game plus the values derived from it at ``now``."""
    data = game.to_json()
    data["state"] = session_state(game).value
    data["elapsed_seconds"] = elapsed_seconds(game, now)
    data["clock"] = fmt_mmss(data["elapsed_seconds"])
    data["events"] = [event.to_dict() for event in sorted_events(game.events)]
    for entry, state in zip(data["lineup"], game.lineup):
        entry["current_playtime_seconds"] = current_playtime_seconds(state, now)
    return data


def create_app(settings: Optional[AppSettings] = None, services: Optional[dict] = None) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Args:
        settings: Settings used to build the services
        services: Pre-built service suite (see ``ServiceFactory``)

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    app_state = WebAppState(settings, services)
    app.config["APP_STATE"] = app_state
    controller = app_state.controller

    @app.errorhandler(GameFinishedError)
    def handle_finished(e):
        return jsonify({"success": False, "error": str(e)}), 409

    @app.errorhandler(PersistenceError)
    def handle_persistence(e):
        return jsonify({"success": False, "error": str(e)}), 502

    @app.errorhandler(ValidationError)
    def handle_validation(e):
        return jsonify({"success": False, "error": str(e)}), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found(e):
        return jsonify({"success": False, "error": str(e)}), 404

    def _game_or_none(game_id: str) -> Optional[Game]:
        game = controller.get_game(game_id)
        if game is None:
            logger.warning("Request for unknown game %s", game_id)
        return game

    @app.route("/", methods=["GET"])
    def index():
        return jsonify({
            "success": True,
            "name": APP_TITLE,
            "version": __version__,
            "team_id": controller.team_id,
        })

    # ==================== Games ==================== #

    @app.route("/api/games", methods=["GET"])
    def list_games():
        """List every game, newest first."""
        current = now_ts()
        return jsonify({
            "success": True,
            "games": [_game_data(game, current) for game in controller.games],
            "history": controller.history.to_dict(),
        })

    @app.route("/api/games", methods=["POST"])
    def create_game():
        """Create a game with every roster player on the bench."""
        data = _json_body()
        game = controller.create_game(
            opponent=data.get("opponent", ""),
            date=data.get("date", ""),
            time=data.get("time", ""),
            location=data.get("location", "home"),
            season=data.get("season", ""),
            competition=data.get("competition", ""),
        )
        return jsonify({"success": True, "game": _game_data(game, now_ts())}), 201

    @app.route("/api/games/<game_id>", methods=["PATCH"])
    def update_game(game_id: str):
        if _game_or_none(game_id) is None:
            return _not_found("Game not found")
        game = controller.update_game(game_id, **_json_body())
        return jsonify({"success": True, "game": _game_data(game, now_ts())})

    @app.route("/api/games/<game_id>", methods=["DELETE"])
    def delete_game(game_id: str):
        if _game_or_none(game_id) is None:
            return _not_found("Game not found")
        controller.delete_game(game_id)
        return jsonify({"success": True, "message": f"Game {game_id} deleted"})

    @app.route("/api/games/<game_id>/<any(start, stop, finish, reset):action>", methods=["POST"])
    def lifecycle(game_id: str, action: str):
        """Start, stop, finish or reset a game."""
        if _game_or_none(game_id) is None:
            return _not_found("Game not found")
        if action == "reset":
            game = controller.reset(game_id)
        else:
            game = getattr(controller, action)(game_id, now=now_ts())
        return jsonify({"success": True, "game": _game_data(game, now_ts())})

    @app.route("/api/games/<game_id>/clock", methods=["GET"])
    def clock(game_id: str):
        """Clock display, recomputed from the stored instants."""
        game = _game_or_none(game_id)
        if game is None:
            return _not_found("Game not found")
        current = now_ts()
        seconds = elapsed_seconds(game, current)
        return jsonify({
            "success": True,
            "state": session_state(game).value,
            "elapsed_seconds": seconds,
            "display": fmt_mmss(seconds),
            "counts": location_counts(game),
            "playtime": {
                state.player_id: current_playtime_seconds(state, current) for state in game.lineup
            },
        })

    @app.route("/api/games/<game_id>/summary", methods=["GET"])
    def summary(game_id: str):
        if _game_or_none(game_id) is None:
            return _not_found("Game not found")
        return jsonify({"success": True, "summary": asdict(controller.summary(game_id, now_ts()))})

    # ==================== Gameplay ==================== #

    @app.route("/api/games/<game_id>/moves", methods=["POST"])
    def move(game_id: str):
        """Move a player between bench, field and inactive."""
        game = _game_or_none(game_id)
        if game is None:
            return _not_found("Game not found")
        data = _json_body()
        player_id = data.get("player_id")
        if not player_id or not data.get("to"):
            return jsonify({"success": False, "error": "player_id and to are required"}), 400
        if game.get_player_state(player_id) is None:
            return _not_found("Player not in lineup")
        event = controller.move_player(
            game_id, player_id, data["to"],
            position=_position(data),
            from_location=data.get("from"),
            now=now_ts(),
        )
        return jsonify({"success": True, "event": event.to_dict() if event else None})

    @app.route("/api/games/<game_id>/swap", methods=["POST"])
    def swap(game_id: str):
        game = _game_or_none(game_id)
        if game is None:
            return _not_found("Game not found")
        data = _json_body()
        incoming, outgoing = data.get("in_id"), data.get("out_id")
        if not incoming or not outgoing:
            return jsonify({"success": False, "error": "Both in_id and out_id required"}), 400
        if game.get_player_state(incoming) is None or game.get_player_state(outgoing) is None:
            return _not_found("Player not in lineup")
        events = controller.swap_players(game_id, incoming, outgoing, now=now_ts())
        return jsonify({"success": True, "events": [event.to_dict() for event in events]})

    @app.route("/api/games/<game_id>/goals", methods=["POST"])
    def add_goal(game_id: str):
        if _game_or_none(game_id) is None:
            return _not_found("Game not found")
        data = _json_body()
        event = controller.add_goal(
            game_id, data.get("team", ""),
            scorer_id=data.get("scorer_id"),
            assist_id=data.get("assist_id"),
            now=now_ts(),
        )
        return jsonify({"success": True, "event": event.to_dict()}), 201

    @app.route("/api/games/<game_id>/goals/<side>", methods=["DELETE"])
    def remove_goal(game_id: str, side: str):
        """Undo the most recent goal for a side."""
        if _game_or_none(game_id) is None:
            return _not_found("Game not found")
        event = controller.remove_last_goal(game_id, side)
        return jsonify({"success": True, "removed": event.to_dict() if event else None})

    # ==================== Planning ==================== #

    @app.route("/api/games/<game_id>/plan", methods=["POST"])
    def stage(game_id: str):
        """Stage a bench player to replace a field player."""
        game = _game_or_none(game_id)
        if game is None:
            return _not_found("Game not found")
        data = _json_body()
        bench_id, target_id = data.get("bench_player_id"), data.get("target_player_id")
        if not bench_id or not target_id:
            return jsonify({"success": False, "error": "bench_player_id and target_player_id required"}), 400
        if game.get_player_state(bench_id) is None or game.get_player_state(target_id) is None:
            return _not_found("Player not in lineup")
        controller.stage_substitution(game_id, bench_id, target_id, _position(data))
        planner = controller.planner_for(game_id)
        return jsonify({"success": True, "pending": [asdict(swap) for swap in planner.pending]})

    @app.route("/api/games/<game_id>/plan/commit", methods=["POST"])
    def commit_plan(game_id: str):
        if _game_or_none(game_id) is None:
            return _not_found("Game not found")
        events = controller.commit_plan(game_id, now=now_ts()) or []
        return jsonify({"success": True, "events": [event.to_dict() for event in events]})

    @app.route("/api/games/<game_id>/plan/cancel", methods=["POST"])
    def cancel_plan(game_id: str):
        return jsonify({"success": True, "cancelled": controller.cancel_plan(game_id)})

    # ==================== Roster ==================== #

    @app.route("/api/roster", methods=["PUT"])
    def replace_roster():
        """Replace the roster with the players sent by the roster owner."""
        data = _json_body()
        try:
            players = [Player.from_dict(p) for p in data.get("players") or []]
        except (KeyError, TypeError) as e:
            raise ValidationError(f"Invalid player record: {e}")
        app_state.roster.replace_all(players)
        controller.load()
        app_state.draft.sync_with_roster(app_state.roster.players)
        return jsonify({"success": True, "players": [p.to_dict() for p in app_state.roster.players]})

    @app.route("/api/roster/<player_id>", methods=["DELETE"])
    def remove_player(player_id: str):
        if not app_state.roster.remove_player(player_id):
            return _not_found("Player not found")
        return jsonify({"success": True, "message": f"Player {player_id} removed"})

    # ==================== Lineup draft and templates ==================== #

    @app.route("/api/draft", methods=["GET"])
    def get_draft():
        return jsonify({"success": True, "slots": app_state.draft.to_dict()})

    @app.route("/api/draft", methods=["POST"])
    def edit_draft():
        """Move, swap or reset players in the lineup draft."""
        data = _json_body()
        action = data.get("action")
        draft = app_state.draft
        if action == "move":
            try:
                location = Location(data.get("location"))
            except ValueError:
                raise ValidationError(f"Unknown location {data.get('location')!r}")
            draft.move(data.get("player_id", ""), location, _position(data))
        elif action == "swap":
            draft.swap(data.get("first_id", ""), data.get("second_id", ""))
        elif action == "reset":
            draft.reset()
        else:
            return jsonify({"success": False, "error": "action must be move, swap or reset"}), 400
        return jsonify({"success": True, "slots": draft.to_dict()})

    @app.route("/api/lineups", methods=["GET"])
    def list_lineups():
        return jsonify({"success": True, "lineups": [t.to_dict() for t in app_state.lineups.templates]})

    @app.route("/api/lineups", methods=["POST"])
    def save_lineup():
        """Save the current draft as a named lineup."""
        template = app_state.lineups.save(_json_body().get("name", ""))
        return jsonify({"success": True, "lineup": template.to_dict()})

    @app.route("/api/lineups/<name>/load", methods=["POST"])
    def load_lineup(name: str):
        app_state.lineups.load(name)
        return jsonify({"success": True, "slots": app_state.draft.to_dict()})

    @app.route("/api/lineups/<name>", methods=["DELETE"])
    def delete_lineup(name: str):
        app_state.lineups.delete(name)
        return jsonify({"success": True, "message": f"Lineup '{name}' deleted"})

    return app


def run_web_app(settings: Optional[AppSettings] = None) -> None:
    """
    Run the web application.

    Args:
        settings: Settings to run with (defaults to the environment)
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)
    app = create_app(settings)
    logger.info("Serving match-day API on %s:%s", settings.WEB_HOST, settings.WEB_PORT)
    app.run(host=settings.WEB_HOST, port=settings.WEB_PORT, debug=False)
