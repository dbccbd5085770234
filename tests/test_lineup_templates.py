"""
Unit tests for the lineup draft and saved lineup templates.
"""
import unittest
from unittest.mock import MagicMock

import pytest

from matchday.models import FieldPosition, LineupSlot, Location, Player
from matchday.services import (
    DurableStore, FileDurableStore, NotFoundError, PersistenceError, StoreResult, ValidationError,
)
from matchday.services.lineup_templates import LineupDraft, SavedLineupService
from matchday.services.roster_service import Roster


class LineupDraftTests(unittest.TestCase):
    def setUp(self) -> None:
        self.draft = LineupDraft(["p1", "p2", "p3"])

    def test_move_and_swap(self) -> None:
        self.draft.move("p1", Location.FIELD, FieldPosition(30, 30))
        self.draft.swap("p1", "p2")
        self.assertEqual(self.draft.location_of("p1"), Location.BENCH)
        self.assertIsNone(self.draft.position_of("p1"))
        self.assertEqual(self.draft.location_of("p2"), Location.FIELD)
        self.assertEqual(self.draft.position_of("p2"), FieldPosition(30, 30))

    def test_invalid_moves(self) -> None:
        with self.assertRaises(ValidationError):
            self.draft.move("p1", Location.INACTIVE)
        with self.assertRaises(ValidationError):
            self.draft.move("p1", Location.FIELD)
        with self.assertRaises(NotFoundError):
            self.draft.move("ghost", Location.BENCH)

    def test_reset_and_roster_sync(self) -> None:
        self.draft.move("p1", Location.FIELD, FieldPosition(1, 1))
        self.draft.sync_with_roster([Player("p1"), Player("p4")])
        self.assertEqual([s.player_id for s in self.draft.snapshot()], ["p1", "p4"])
        self.assertEqual(self.draft.location_of("p1"), Location.FIELD)

        self.draft.reset()
        self.assertTrue(all(s.location is Location.BENCH for s in self.draft.snapshot()))

    def test_apply_benches_players_missing_from_slots(self) -> None:
        self.draft.move("p3", Location.FIELD, FieldPosition(9, 9))
        self.draft.apply([
            LineupSlot("p1", Location.FIELD, FieldPosition(5, 5)),
            LineupSlot("unknown", Location.FIELD, FieldPosition(1, 1)),
        ])
        self.assertEqual(self.draft.position_of("p1"), FieldPosition(5, 5))
        self.assertEqual(self.draft.location_of("p3"), Location.BENCH)
        self.assertEqual(len(self.draft.snapshot()), 3)


def test_save_load_delete_round(tmp_path):
    draft = LineupDraft(["p1", "p2"])
    service = SavedLineupService(FileDurableStore(str(tmp_path)), "t1", draft)
    assert service.refresh() == []

    draft.move("p1", Location.FIELD, FieldPosition(40, 60))
    saved = service.save("  Cup final ")
    assert saved.name == "Cup final"

    draft.reset()
    service.load("Cup final")
    assert draft.location_of("p1") is Location.FIELD
    assert draft.position_of("p1") == FieldPosition(40, 60)

    resaved = service.save("Cup final")
    assert resaved.id == saved.id
    assert [t.name for t in service.templates] == ["Cup final"]

    service.delete("Cup final")
    assert service.templates == []
    assert service.refresh() == []


def test_failed_writes_leave_templates_unchanged():
    store = MagicMock(spec=DurableStore)
    store.fetch_templates.return_value = StoreResult.success([])
    store.upsert_template.return_value = StoreResult.failure("offline")
    service = SavedLineupService(store, "t1", LineupDraft(["p1"]))
    service.refresh()

    with pytest.raises(PersistenceError):
        service.save("Plan A")
    assert service.templates == []

    with pytest.raises(ValidationError):
        service.save("   ")
    with pytest.raises(NotFoundError):
        service.delete("Plan A")


def test_failed_delete_keeps_template(tmp_path):
    store = FileDurableStore(str(tmp_path))
    service = SavedLineupService(store, "t1", LineupDraft(["p1"]))
    service.save("Plan A")

    service.store = MagicMock(spec=DurableStore)
    service.store.delete_template.return_value = StoreResult.failure("timeout")
    with pytest.raises(PersistenceError):
        service.delete("Plan A")
    assert [t.name for t in service.templates] == ["Plan A"]


def test_roster_notifies_subscribers_on_removal():
    roster = Roster([Player("p1", "Ada"), Player("p2", "Bo")])
    removed = []
    roster.subscribe(removed.append)

    assert roster.remove_player("p1") is True
    assert roster.remove_player("p1") is False
    assert removed == ["p1"]
    assert roster.ids() == ["p2"]
    assert roster.get("p2").display_name == "Bo"


def test_roster_rejects_duplicate_ids():
    with pytest.raises(ValidationError):
        Roster([Player("p1"), Player("p1")])
