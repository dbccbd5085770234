"""
Unit tests for the game, player, history and saved lineup models.

Tests serialization and the small helpers the services rely on.
"""
import json
import unittest

from matchday.models import (
    EventType, FieldPosition, Game, GameEvent, GameHistory, LineupSlot, Location,
    Player, PlayerLineupState, SavedLineup, Side, StorageClass, TimerStatus,
)
from matchday.utils.constants import HISTORY_MAX_ENTRIES


class TestGameModel(unittest.TestCase):
    """Test cases for the Game model."""

    def setUp(self) -> None:
        """Set up test fixtures."""
        self.game = Game(
            id="g1",
            team_id="t1",
            opponent="Rovers",
            date="2024-05-01",
            time="10:00",
            location=Side.AWAY,
            season="2024",
            competition="League",
            away_score=1,
            timer_status=TimerStatus.RUNNING,
            timer_start_ts=100.0,
            timer_elapsed_seconds=300,
            lineup=[
                PlayerLineupState("p1", Location.FIELD, FieldPosition(20, 30),
                                  initial_position=FieldPosition(20, 30),
                                  playtime_seconds=300, playtimer_start_ts=100.0, is_starter=True),
                PlayerLineupState("p2"),
            ],
            events=[
                GameEvent("e1", EventType.GOAL, Side.AWAY, 150.0, 350, scorer_player_id="p1"),
            ],
        )

    def test_json_round_trip_survives_encoding(self) -> None:
        data = json.loads(json.dumps(self.game.to_json()))
        restored = Game.from_json(data)

        self.assertEqual(restored, self.game)
        self.assertEqual(data["location"], "away")
        self.assertEqual(data["timer_status"], "running")
        self.assertEqual(data["lineup"][1]["position"], None)

    def test_player_lookups(self) -> None:
        self.assertIs(self.game.get_player_state("p2"), self.game.lineup[1])
        self.assertIsNone(self.game.get_player_state("p9"))
        self.assertEqual([s.player_id for s in self.game.players_at(Location.FIELD)], ["p1"])

    def test_scores_never_go_negative(self) -> None:
        self.game.set_score(Side.HOME, -2)
        self.assertEqual(self.game.home_score, 0)
        self.assertEqual(self.game.score_for(Side.AWAY), 1)

    def test_copy_is_independent(self) -> None:
        snapshot = self.game.copy()
        self.game.lineup[0].playtime_seconds = 999
        self.game.events.clear()
        self.assertEqual(snapshot.lineup[0].playtime_seconds, 300)
        self.assertEqual(len(snapshot.events), 1)

    def test_defaults(self) -> None:
        game = Game(id="g2")
        self.assertFalse(game.is_running)
        self.assertFalse(game.is_durable)
        self.assertIs(game.storage_class, StorageClass.VOLATILE)
        self.assertIs(game.our_side(), Side.HOME)

    def test_stint_seconds(self) -> None:
        state = self.game.lineup[0]
        self.assertEqual(state.current_stint_seconds(160.4), 60)
        self.assertEqual(state.current_stint_seconds(50.0), 0)
        self.assertEqual(self.game.lineup[1].current_stint_seconds(500.0), 0)

    def test_event_references(self) -> None:
        event = self.game.events[0]
        self.assertTrue(event.is_goal)
        self.assertTrue(event.references("p1"))
        self.assertFalse(event.references("p2"))


class TestSupportingModels(unittest.TestCase):
    """Test cases for Player, GameHistory and SavedLineup."""

    def test_player_display_name(self) -> None:
        self.assertEqual(Player("p1", "Ana", "Lima").display_name, "Ana Lima")
        self.assertEqual(Player("p2").display_name, "p2")

    def test_player_from_dict_normalises_number(self) -> None:
        player = Player.from_dict({"id": 7, "first_name": "Bo", "number": 10})
        self.assertEqual((player.id, player.number), ("7", "10"))
        self.assertIsNone(Player.from_dict({"id": "p3", "number": ""}).number)

    def test_history_keeps_most_recent_first(self) -> None:
        history = GameHistory()
        history.record("2023", "League")
        history.record("2024", "Cup")
        history.record("2023", None)

        self.assertEqual(history.seasons, ["2023", "2024"])
        self.assertEqual(history.competitions, ["Cup", "League"])
        self.assertEqual(history.most_recent_competition(), "Cup")

    def test_history_is_bounded(self) -> None:
        history = GameHistory()
        for index in range(HISTORY_MAX_ENTRIES + 5):
            history.record(season=f"S{index}")
        self.assertEqual(len(history.seasons), HISTORY_MAX_ENTRIES)
        self.assertEqual(history.most_recent_season(), f"S{HISTORY_MAX_ENTRIES + 4}")

    def test_history_from_bad_data(self) -> None:
        self.assertEqual(GameHistory.from_dict(None), GameHistory())
        restored = GameHistory.from_dict({"seasons": ["2024", 5], "competitions": None})
        self.assertEqual((restored.seasons, restored.competitions), (["2024"], []))

    def test_saved_lineup_drops_bench_positions(self) -> None:
        lineup = SavedLineup.from_dict({
            "id": "l1",
            "team_id": "t1",
            "name": "Sunday",
            "slots": [
                {"player_id": "p1", "location": "field", "position": {"x": 10, "y": 20}},
                {"player_id": "p2", "location": "bench", "position": {"x": 5, "y": 5}},
            ],
        })
        self.assertEqual(lineup.slot_map()["p1"], LineupSlot("p1", Location.FIELD, FieldPosition(10, 20)))
        self.assertIsNone(lineup.slot_map()["p2"].position)
        self.assertEqual(SavedLineup.from_dict(lineup.to_dict()), lineup)


if __name__ == '__main__':
    unittest.main()
