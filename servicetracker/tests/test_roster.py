import unittest
from unittest import mock

from servicetracker.tracker.errors import (
    AddError,
    DuplicateError,
    FetchError,
    RemoveError,
    StoreError,
)
from servicetracker.tracker.roster import RosterStore
from servicetracker.tracker.store import EntryStore


class RosterStoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.store = EntryStore()
        for name in ("Meera", "Anil", "Zoya"):
            self.store.insert_therapist({"name": name})
        self.roster = RosterStore(self.store)
        self.roster.load()

    def tearDown(self) -> None:
        self.store.close()

    def test_load_orders_by_name(self) -> None:
        self.assertEqual(self.roster.names, ["Anil", "Meera", "Zoya"])
        self.assertIn("Meera", self.roster)
        self.assertEqual(len(self.roster), 3)
        self.assertFalse(self.roster.loading)

    def test_add_trims_and_reloads(self) -> None:
        self.assertEqual(self.roster.add("  Alice  "), "Alice")
        self.assertEqual(self.roster.names, ["Alice", "Anil", "Meera", "Zoya"])

    def test_blank_add_is_a_silent_noop(self) -> None:
        store = mock.Mock(spec=EntryStore)
        roster = RosterStore(store)
        self.assertIsNone(roster.add(""))
        self.assertIsNone(roster.add("   "))
        store.insert_therapist.assert_not_called()
        store.list_therapists.assert_not_called()

    def test_duplicate_add_raises_and_leaves_roster(self) -> None:
        with self.assertRaises(DuplicateError):
            self.roster.add("Meera")
        self.roster.load()
        self.assertEqual(self.roster.names, ["Anil", "Meera", "Zoya"])

    def test_other_add_failure_is_add_error(self) -> None:
        store = mock.Mock(spec=EntryStore)
        store.insert_therapist.side_effect = StoreError("disk I/O error")
        roster = RosterStore(store)
        with self.assertRaises(AddError):
            roster.add("Ravi")
        store.list_therapists.assert_not_called()

    def test_remove_requires_confirmation(self) -> None:
        store = mock.Mock(wraps=self.store)
        roster = RosterStore(store)
        roster.load()
        self.assertFalse(roster.remove("Anil"))
        store.delete_therapist.assert_not_called()
        self.assertEqual(roster.names, ["Anil", "Meera", "Zoya"])

    def test_confirmed_remove_reloads(self) -> None:
        self.assertTrue(self.roster.remove("Anil", confirmed=True))
        self.assertEqual(self.roster.names, ["Meera", "Zoya"])

    def test_remove_unknown_name_reports_noop(self) -> None:
        self.assertFalse(self.roster.remove("Ghost", confirmed=True))
        self.assertEqual(self.roster.names, ["Anil", "Meera", "Zoya"])

    def test_remove_failure_leaves_list_stale(self) -> None:
        store = mock.Mock(spec=EntryStore)
        store.list_therapists.return_value = [{"name": "Anil"}]
        store.delete_therapist.side_effect = StoreError("timeout")
        roster = RosterStore(store)
        roster.load()
        with self.assertLogs("servicetracker.tracker.roster", level="ERROR"):
            with self.assertRaises(RemoveError):
                roster.remove("Anil", confirmed=True)
        self.assertEqual(roster.names, ["Anil"])
        self.assertEqual(store.list_therapists.call_count, 1)

    def test_failed_load_keeps_previous_list(self) -> None:
        store = mock.Mock(spec=EntryStore)
        store.list_therapists.side_effect = [[{"name": "Anil"}], StoreError("offline")]
        roster = RosterStore(store)
        self.assertTrue(roster.load())
        with self.assertLogs("servicetracker.tracker.roster", level="ERROR"):
            self.assertFalse(roster.load())
        self.assertEqual(roster.names, ["Anil"])
        self.assertIsInstance(roster.last_error, FetchError)
        self.assertFalse(roster.loading)


if __name__ == "__main__":
    unittest.main()
