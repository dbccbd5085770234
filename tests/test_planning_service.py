"""Tests for staged substitutions."""

import copy
from unittest.mock import patch

import pytest

from matchday.models import FieldPosition, Game, Location, PlayerLineupState
from matchday.services import GameFinishedError, NotFoundError, ValidationError, planning_service
from matchday.services.clock_service import start_clock
from matchday.services.planning_service import SubstitutionPlanner
from matchday.services.substitution_service import move_player


def make_game() -> Game:
    field = [
        PlayerLineupState(f"f{i}", Location.FIELD, FieldPosition(10.0 * i, 40)) for i in range(1, 6)
    ]
    bench = [PlayerLineupState(f"b{i}", Location.BENCH) for i in range(1, 5)]
    game = Game(id="g1", lineup=field + bench)
    start_clock(game, now=0)
    return game


SWAPS = [("b1", "f1"), ("b2", "f2"), ("b3", "f3")]


def test_cancel_leaves_lineup_untouched():
    game = make_game()
    before = copy.deepcopy(game.lineup)
    planner = SubstitutionPlanner(game)
    for bench_id, field_id in SWAPS:
        planner.stage(bench_id, field_id)

    planner.cancel()

    assert planner.is_empty()
    assert game.lineup == before
    assert game.events == []


def test_commit_matches_sequential_moves():
    planned = make_game()
    manual = make_game()

    planner = SubstitutionPlanner(planned)
    for bench_id, field_id in SWAPS:
        planner.stage(bench_id, field_id)
    events = planner.commit(now=900)

    for bench_id, field_id in SWAPS:
        position = manual.get_player_state(field_id).position
        move_player(manual, field_id, Location.FIELD, Location.BENCH, now=900)
        move_player(manual, bench_id, Location.BENCH, Location.FIELD, position, now=900)

    assert planned.lineup == manual.lineup
    assert len(events) == 6
    assert [(e.player_in_id, e.player_out_id) for e in events[:2]] == [(None, "f1"), ("b1", None)]
    assert all(e.game_seconds == 900 for e in events)
    assert planner.is_empty()


def test_staged_position_defaults_to_target_and_can_be_overridden():
    game = make_game()
    planner = SubstitutionPlanner(game)
    assert planner.stage("b1", "f2").target_position == FieldPosition(20, 40)
    assert planner.stage("b2", "f3", FieldPosition(99, 1)).target_position == FieldPosition(99, 1)


def test_retargeting_replaces_previous_claims():
    game = make_game()
    planner = SubstitutionPlanner(game)
    planner.stage("b1", "f1")
    planner.stage("b1", "f2")
    assert [(s.bench_player_id, s.target_field_player_id) for s in planner.pending] == [("b1", "f2")]

    planner.stage("b2", "f2")
    assert [(s.bench_player_id, s.target_field_player_id) for s in planner.pending] == [("b2", "f2")]


def test_staging_does_not_touch_the_game():
    game = make_game()
    before = game.to_json()
    planner = SubstitutionPlanner(game)
    planner.stage("b1", "f1")
    planner.unstage("b1")
    planner.stage("b2", "f2")
    assert game.to_json() == before


def test_failed_commit_restores_lineup_and_events():
    game = make_game()
    planner = SubstitutionPlanner(game)
    for bench_id, field_id in SWAPS:
        planner.stage(bench_id, field_id)
    lineup_before = copy.deepcopy(game.lineup)

    calls = []
    real_move = planning_service.move_player

    def flaky_move(*args, **kwargs):
        calls.append(args[1])
        if len(calls) == 3:
            raise RuntimeError("storage hiccup")
        return real_move(*args, **kwargs)

    with patch.object(planning_service, "move_player", side_effect=flaky_move):
        with pytest.raises(RuntimeError):
            planner.commit(now=500)

    assert game.lineup == lineup_before
    assert game.events == []
    assert len(planner.pending) == 3


def test_unknown_players_and_finished_games_are_rejected():
    game = make_game()
    planner = SubstitutionPlanner(game)
    with pytest.raises(NotFoundError):
        planner.stage("ghost", "f1")

    game.is_finished = True
    with pytest.raises(GameFinishedError):
        planner.commit()
    with pytest.raises(GameFinishedError):
        SubstitutionPlanner(game)


def test_commit_without_a_target_position_rolls_back():
    game = make_game()
    before = copy.deepcopy(game.lineup)
    planner = SubstitutionPlanner(game)
    planner.stage("b1", "f1")
    planner.stage("b2", "b3")

    with pytest.raises(ValidationError):
        planner.commit(now=600)

    assert game.lineup == before
    assert game.events == []
