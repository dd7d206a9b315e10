import datetime as dt
import sqlite3
import unittest

from servicetracker.tracker.database import SCHEMA_VERSION, get_metadata
from servicetracker.tracker.errors import DuplicateError, StoreError
from servicetracker.tracker.store import EntryStore, format_timestamp


class EntryStoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.store = EntryStore()

    def tearDown(self) -> None:
        self.store.close()

    def entry(self, **overrides) -> dict:
        record = {
            "bill_no": "B-100",
            "customer_name": "Kavya",
            "phone_no": "",
            "staff_name": "Anil",
            "in_time": "11:15",
            "out_time": "",
            "payment": {"cash": 200.0, "card": 0.0, "gpay": 150.0, "upi": 0.0},
            "remarks": "",
        }
        record.update(overrides)
        return record

    def test_schema_version_recorded(self) -> None:
        self.assertEqual(get_metadata(self.store.conn, "schema_version"), str(SCHEMA_VERSION))

    def test_therapists_sorted_and_unique(self) -> None:
        self.store.insert_therapist({"name": "Zoya"})
        self.store.insert_therapist({"name": "Anil"})
        with self.assertRaises(DuplicateError):
            self.store.insert_therapist({"name": "Zoya"})
        self.assertEqual(self.store.list_therapists(), [{"name": "Anil"}, {"name": "Zoya"}])
        self.store.delete_therapist("Zoya")
        self.assertEqual(self.store.list_therapists(), [{"name": "Anil"}])

    def test_insert_and_list_entries_since(self) -> None:
        before = dt.datetime.now(dt.timezone.utc) - dt.timedelta(seconds=1)
        saved = self.store.insert_entry(self.entry())
        self.assertEqual(saved["payment"]["gpay"], 150.0)
        rows = self.store.list_entries_since(before)
        self.assertEqual(len(rows), 1)
        row = rows[0]
        self.assertEqual(row["id"], saved["id"])
        self.assertEqual(row["payment"], {"cash": 200.0, "card": 0.0, "gpay": 150.0, "upi": 0.0})
        self.assertIsNone(row["phone_no"])
        self.assertEqual(row["created_at"], saved["created_at"])

        later = dt.datetime.now(dt.timezone.utc) + dt.timedelta(minutes=1)
        self.assertEqual(self.store.list_entries_since(later), [])

    def test_missing_tenders_stored_as_zero(self) -> None:
        saved = self.store.insert_entry(self.entry(payment={"cash": 80}))
        self.assertEqual(saved["payment"], {"cash": 80, "card": 0, "gpay": 0, "upi": 0})

    def test_delete_reports_whether_a_row_matched(self) -> None:
        self.store.insert_therapist({"name": "Anil"})
        self.assertFalse(self.store.delete_therapist("Ghost"))
        self.assertTrue(self.store.delete_therapist("Anil"))

    def test_unreadable_payment_becomes_store_error(self) -> None:
        before = dt.datetime.now(dt.timezone.utc) - dt.timedelta(seconds=1)
        saved = self.store.insert_entry(self.entry())
        self.store.conn.execute(
            "UPDATE service_entries SET payment = ? WHERE id = ?", ("{not json", saved["id"])
        )
        with self.assertRaises(StoreError):
            self.store.list_entries_since(before)

    def test_backend_errors_become_store_errors(self) -> None:
        self.store.conn.execute("DROP TABLE service_entries")
        with self.assertRaises(StoreError) as ctx:
            self.store.insert_entry(self.entry())
        self.assertNotIsInstance(ctx.exception, DuplicateError)
        self.assertIsInstance(ctx.exception.__cause__, sqlite3.Error)

    def test_format_timestamp_normalises_to_utc(self) -> None:
        moment = dt.datetime(2024, 5, 1, 5, 30, tzinfo=dt.timezone(dt.timedelta(hours=5, minutes=30)))
        self.assertEqual(format_timestamp(moment), "2024-05-01T00:00:00.000000+00:00")


if __name__ == "__main__":
    unittest.main()
