import unittest

from matchday.models import FieldPosition, Game, Location, PlayerLineupState, SessionState, TimerStatus
from matchday.services import GameFinishedError
from matchday.services.clock_service import (
    current_playtime_seconds, elapsed_seconds, is_game_active, reset_clock,
    session_state, start_clock, stop_clock,
)
from matchday.utils import fmt_match_minute, fmt_mmss


def make_game() -> Game:
    return Game(
        id="g1",
        lineup=[
            PlayerLineupState("p1", Location.FIELD, FieldPosition(20, 30)),
            PlayerLineupState("p2", Location.BENCH),
            PlayerLineupState("p3", Location.INACTIVE),
        ],
    )


class ClockServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.game = make_game()

    def test_elapsed_sums_running_intervals(self) -> None:
        start_clock(self.game, now=100)
        self.assertEqual(elapsed_seconds(self.game, now=160), 60)
        # repeated reads never change the stored state
        for _ in range(5):
            elapsed_seconds(self.game, now=170)
        stop_clock(self.game, now=200)
        self.assertEqual(self.game.timer_elapsed_seconds, 100)

        start_clock(self.game, now=1000)
        self.assertEqual(self.game.timer_elapsed_seconds, 100)
        self.assertEqual(elapsed_seconds(self.game, now=1030), 130)
        stop_clock(self.game, now=1050)
        self.assertEqual(elapsed_seconds(self.game, now=5000), 150)

    def test_stop_rounds_to_whole_seconds(self) -> None:
        start_clock(self.game, now=10.0)
        stop_clock(self.game, now=22.6)
        self.assertEqual(self.game.timer_elapsed_seconds, 13)
        self.assertEqual(self.game.get_player_state("p1").playtime_seconds, 13)

    def test_first_start_marks_starters_and_initial_positions(self) -> None:
        kickoff = start_clock(self.game, now=0)
        self.assertTrue(kickoff)

        p1, p2, p3 = (self.game.get_player_state(pid) for pid in ("p1", "p2", "p3"))
        self.assertTrue(p1.is_starter)
        self.assertTrue(p2.is_starter)
        self.assertFalse(p3.is_starter)
        self.assertEqual(p1.initial_position, FieldPosition(20, 30))
        self.assertIsNone(p2.initial_position)
        self.assertEqual(p1.playtimer_start_ts, 0)
        self.assertIsNone(p2.playtimer_start_ts)
        self.assertIsNone(p3.playtimer_start_ts)

    def test_resume_is_not_a_kickoff(self) -> None:
        start_clock(self.game, now=0)
        stop_clock(self.game, now=60)
        self.game.get_player_state("p2").location = Location.FIELD
        self.assertFalse(start_clock(self.game, now=100))
        self.assertEqual(self.game.get_player_state("p1").initial_position, FieldPosition(20, 30))

    def test_start_while_running_is_ignored(self) -> None:
        start_clock(self.game, now=0)
        self.assertFalse(start_clock(self.game, now=50))
        self.assertEqual(self.game.timer_start_ts, 0)

    def test_no_stints_survive_a_stop(self) -> None:
        start_clock(self.game, now=0)
        stop_clock(self.game, now=90)
        self.assertEqual(self.game.timer_status, TimerStatus.STOPPED)
        self.assertIsNone(self.game.timer_start_ts)
        for state in self.game.lineup:
            self.assertIsNone(state.playtimer_start_ts)
        self.assertEqual(self.game.get_player_state("p1").playtime_seconds, 90)
        self.assertEqual(self.game.get_player_state("p2").playtime_seconds, 0)

    def test_current_playtime_includes_running_stint(self) -> None:
        start_clock(self.game, now=0)
        p1 = self.game.get_player_state("p1")
        self.assertEqual(current_playtime_seconds(p1, now=45), 45)
        self.assertEqual(p1.playtime_seconds, 0)

    def test_session_states(self) -> None:
        self.assertEqual(session_state(self.game), SessionState.NOT_STARTED)
        self.assertFalse(is_game_active(self.game))
        start_clock(self.game, now=0)
        self.assertEqual(session_state(self.game), SessionState.RUNNING)
        stop_clock(self.game, now=10)
        self.assertEqual(session_state(self.game), SessionState.PAUSED)
        self.assertTrue(is_game_active(self.game))
        reset_clock(self.game)
        self.assertEqual(session_state(self.game), SessionState.NOT_STARTED)
        self.game.is_finished = True
        self.assertEqual(session_state(self.game), SessionState.FINISHED)

    def test_finished_game_rejects_clock_changes(self) -> None:
        self.game.is_finished = True
        with self.assertRaises(GameFinishedError):
            start_clock(self.game, now=0)
        with self.assertRaises(GameFinishedError):
            stop_clock(self.game, now=0)


def test_fmt_mmss():
    assert fmt_mmss(0) == "00:00"
    assert fmt_mmss(90) == "01:30"
    assert fmt_mmss(5400) == "90:00"
    assert fmt_mmss(-5) == "00:00"


def test_fmt_match_minute_shows_stoppage_time():
    assert fmt_match_minute(0) == "1'"
    assert fmt_match_minute(600) == "11'"
    assert fmt_match_minute(2730) == "45+1'"
    assert fmt_match_minute(2760) == "47'"
    assert fmt_match_minute(5530) == "90+3'"
