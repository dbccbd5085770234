"""Tests for immediate player moves and swaps."""

import pytest

from matchday.models import EventType, FieldPosition, Game, Location, PlayerLineupState, Side
from matchday.services import GameFinishedError, NotFoundError, ValidationError
from matchday.services.clock_service import start_clock, stop_clock
from matchday.services.substitution_service import move_player, swap_players


def make_game(location=Side.HOME) -> Game:
    return Game(
        id="g1",
        location=location,
        lineup=[
            PlayerLineupState("p1", Location.FIELD, FieldPosition(10, 10)),
            PlayerLineupState("p2", Location.FIELD, FieldPosition(50, 50)),
            PlayerLineupState("p3", Location.BENCH),
            PlayerLineupState("p4", Location.INACTIVE),
        ],
    )


def test_arranging_before_kickoff_records_nothing():
    game = make_game()
    assert move_player(game, "p3", Location.BENCH, Location.FIELD, FieldPosition(70, 20), now=5) is None
    assert move_player(game, "p1", Location.FIELD, Location.BENCH, now=6) is None

    assert game.events == []
    p3 = game.get_player_state("p3")
    assert p3.location is Location.FIELD
    assert p3.position == FieldPosition(70, 20)
    assert p3.subbed_on_count == 0
    assert p3.playtimer_start_ts is None
    assert game.get_player_state("p1").position is None


def test_on_and_off_while_active_records_two_entries():
    game = make_game()
    start_clock(game, now=0)

    on = move_player(game, "p3", Location.BENCH, Location.FIELD, FieldPosition(30, 30), now=300)
    off = move_player(game, "p3", Location.FIELD, Location.BENCH, now=300)

    assert [e.type for e in game.events] == [EventType.SUBSTITUTION, EventType.SUBSTITUTION]
    assert on.game_seconds == off.game_seconds == 300
    assert (on.player_in_id, on.player_out_id) == ("p3", None)
    assert (off.player_in_id, off.player_out_id) == (None, "p3")
    assert on.team is Side.HOME

    p3 = game.get_player_state("p3")
    assert p3.subbed_on_count == 1
    assert p3.subbed_off_count == 1


def test_substitution_entries_belong_to_our_side():
    game = make_game(location=Side.AWAY)
    start_clock(game, now=0)
    event = move_player(game, "p1", Location.FIELD, Location.BENCH, now=10)
    assert event.team is Side.AWAY


def test_paused_game_is_still_active():
    game = make_game()
    start_clock(game, now=0)
    stop_clock(game, now=100)

    event = move_player(game, "p3", Location.BENCH, Location.FIELD, FieldPosition(5, 5), now=150)
    assert event is not None
    assert event.game_seconds == 100
    assert game.get_player_state("p3").playtimer_start_ts is None


def test_playtime_folds_when_benched_and_restarts_on_field():
    game = make_game()
    start_clock(game, now=0)
    move_player(game, "p1", Location.FIELD, Location.BENCH, now=120)
    p1 = game.get_player_state("p1")
    assert p1.playtime_seconds == 120
    assert p1.playtimer_start_ts is None

    move_player(game, "p1", Location.BENCH, Location.FIELD, FieldPosition(1, 1), now=200)
    assert p1.playtimer_start_ts == 200
    stop_clock(game, now=260)
    assert p1.playtime_seconds == 180


def test_inactive_moves_are_not_logged_but_playtime_continues():
    game = make_game()
    start_clock(game, now=0)

    assert move_player(game, "p1", Location.FIELD, Location.INACTIVE, now=100) is None
    assert move_player(game, "p4", Location.INACTIVE, Location.BENCH, now=100) is None
    assert move_player(game, "p3", Location.BENCH, Location.INACTIVE, now=100) is None
    assert game.events == []

    stop_clock(game, now=300)
    assert game.get_player_state("p1").playtime_seconds == 300
    assert game.get_player_state("p1").position is None
    assert game.get_player_state("p3").playtime_seconds == 0
    assert game.get_player_state("p1").subbed_off_count == 0


def test_field_reposition_keeps_stint_running():
    game = make_game()
    start_clock(game, now=0)
    move_player(game, "p1", Location.FIELD, Location.FIELD, FieldPosition(90, 90), now=50)
    p1 = game.get_player_state("p1")
    assert p1.position == FieldPosition(90, 90)
    assert p1.playtimer_start_ts == 0
    assert game.events == []


def test_wrong_source_uses_actual_location(caplog):
    game = make_game()
    start_clock(game, now=0)
    event = move_player(game, "p3", Location.FIELD, Location.FIELD, FieldPosition(2, 2), now=10)
    assert event.player_in_id == "p3"
    assert "claimed source" in caplog.text


def test_swap_bench_player_takes_vacated_position():
    game = make_game()
    start_clock(game, now=0)

    events = swap_players(game, "p3", "p2", now=600)

    p2, p3 = game.get_player_state("p2"), game.get_player_state("p3")
    assert p3.location is Location.FIELD
    assert p3.position == FieldPosition(50, 50)
    assert p2.location is Location.BENCH
    assert p2.playtime_seconds == 600
    assert [(e.player_in_id, e.player_out_id) for e in events] == [(None, "p2"), ("p3", None)]


def test_swap_two_field_players_exchanges_positions():
    game = make_game()
    start_clock(game, now=0)
    assert swap_players(game, "p1", "p2", now=10) == []
    assert game.get_player_state("p1").position == FieldPosition(50, 50)
    assert game.get_player_state("p2").position == FieldPosition(10, 10)


def test_unknown_player_and_finished_game_are_rejected():
    game = make_game()
    with pytest.raises(NotFoundError):
        move_player(game, "nobody", None, Location.FIELD, FieldPosition(1, 1))

    game.is_finished = True
    with pytest.raises(GameFinishedError):
        move_player(game, "p3", Location.BENCH, Location.FIELD, FieldPosition(1, 1))


def test_taking_the_field_requires_a_position():
    game = make_game()
    start_clock(game, now=0)

    with pytest.raises(ValidationError):
        move_player(game, "p3", Location.BENCH, Location.FIELD, now=60)
    with pytest.raises(ValidationError):
        move_player(game, "p4", Location.INACTIVE, Location.FIELD, now=60)

    p3 = game.get_player_state("p3")
    assert (p3.location, p3.playtimer_start_ts, p3.subbed_on_count) == (Location.BENCH, None, 0)
    assert game.events == []

    # a field player without a new position keeps the current one
    assert move_player(game, "p1", Location.FIELD, Location.FIELD, now=60) is None
    assert game.get_player_state("p1").position == FieldPosition(10, 10)


def test_swap_with_a_player_off_the_field_is_rejected():
    game = make_game()
    start_clock(game, now=0)

    with pytest.raises(ValidationError):
        swap_players(game, "p3", "p4", now=60)

    assert game.get_player_state("p3").location is Location.BENCH
    assert game.get_player_state("p4").location is Location.INACTIVE
    assert game.events == []
