"""SQLite-backed adapter for the therapist and service entry tables."""

from __future__ import annotations

import datetime as dt
import json
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any

from .database import get_connection, initialize_database
from .entry import TENDERS
from .errors import DuplicateError, StoreError

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%f+00:00"


def format_timestamp(moment: dt.datetime) -> str:
    """Render ``moment`` as a fixed-width UTC string that sorts lexically."""

    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment.astimezone(dt.timezone.utc).strftime(TIMESTAMP_FORMAT)


def _translate(exc: sqlite3.Error) -> StoreError:
    if isinstance(exc, sqlite3.IntegrityError) and "UNIQUE" in str(exc).upper():
        return DuplicateError(str(exc))
    return StoreError(str(exc))


class EntryStore:
    """Exposes the only operations the tracker needs from its backend.

    Every ``sqlite3`` failure is translated here, so callers only ever see
    :class:`DuplicateError` or :class:`StoreError`.
    """

    def __init__(self, db_path: str | Path = ":memory:") -> None:
        self._lock = threading.Lock()
        self.conn = get_connection(db_path)
        initialize_database(self.conn)

    def _read(self, sql: str, params: tuple = ()) -> list[dict]:
        with self._lock:
            try:
                return self.conn.execute(sql, params).fetchall()
            except sqlite3.Error as exc:
                raise _translate(exc) from exc

    def _write(self, sql: str, params: tuple) -> sqlite3.Cursor:
        with self._lock:
            try:
                cur = self.conn.execute(sql, params)
                self.conn.commit()
            except sqlite3.Error as exc:
                self.conn.rollback()
                raise _translate(exc) from exc
            return cur

    # ------------------------------------------------------------------
    # Therapists
    # ------------------------------------------------------------------
    def list_therapists(self) -> list[dict]:
        return self._read("SELECT name FROM therapists ORDER BY name ASC")

    def insert_therapist(self, record: dict) -> dict:
        self._write("INSERT INTO therapists(name) VALUES (?)", (record["name"],))
        return {"name": record["name"]}

    def delete_therapist(self, name: str) -> bool:
        """Delete by exact name. Returns False when no row matched."""

        cur = self._write("DELETE FROM therapists WHERE name = ?", (name,))
        return cur.rowcount > 0

    # ------------------------------------------------------------------
    # Service entries
    # ------------------------------------------------------------------
    def list_entries_since(self, timestamp: dt.datetime) -> list[dict]:
        rows = self._read(
            """
            SELECT * FROM service_entries
            WHERE created_at >= ?
            ORDER BY created_at
            """,
            (format_timestamp(timestamp),),
        )
        for row in rows:
            try:
                row["payment"] = json.loads(row["payment"] or "{}")
            except json.JSONDecodeError as exc:
                raise StoreError(f"Entry {row['id']} has an unreadable payment: {exc}") from exc
        return rows

    def insert_entry(self, payload: dict[str, Any]) -> dict:
        created_at = format_timestamp(dt.datetime.now(dt.timezone.utc))
        payment = {tender: payload["payment"].get(tender, 0) for tender in TENDERS}
        cur = self._write(
            """
            INSERT INTO service_entries(
                bill_no, customer_name, phone_no, staff_name,
                in_time, out_time, payment, remarks, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                payload["bill_no"],
                payload["customer_name"],
                payload.get("phone_no") or None,
                payload["staff_name"],
                payload["in_time"],
                payload.get("out_time") or None,
                json.dumps(payment),
                payload.get("remarks") or None,
                created_at,
            ),
        )
        entry_id = cur.lastrowid
        logger.debug("Inserted service entry %s", entry_id)
        return {**payload, "id": entry_id, "payment": payment, "created_at": created_at}

    def close(self) -> None:
        self.conn.close()
