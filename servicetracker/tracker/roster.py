"""In-memory therapist roster kept in step with the store by re-fetching."""

from __future__ import annotations

import logging
from typing import Any, Iterator

from .errors import AddError, DuplicateError, FetchError, RemoveError, StoreError

logger = logging.getLogger(__name__)


class RosterStore:
    """Therapist names as last fetched from the store.

    The list is never edited locally: every successful add or remove is
    followed by a full reload, so ordering always comes from the store.
    """

    def __init__(self, store: Any) -> None:
        self.store = store
        self.names: list[str] = []
        self.loading = False
        self.last_error: FetchError | None = None

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)

    def load(self) -> bool:
        """Replace the roster with the store's current list.

        On failure the previous list is kept and ``last_error`` is set.
        """

        self.loading = True
        try:
            rows = self.store.list_therapists()
        except StoreError as exc:
            self.last_error = FetchError(f"Could not load therapists: {exc}")
            logger.error("Error fetching therapists: %s", exc)
            return False
        finally:
            self.loading = False
        self.names = [row["name"] for row in rows]
        self.last_error = None
        return True

    def add(self, name: str) -> str | None:
        """Add a therapist and reload. Blank input is ignored."""

        trimmed = (name or "").strip()
        if not trimmed:
            return None
        try:
            self.store.insert_therapist({"name": trimmed})
        except DuplicateError:
            logger.info("Therapist %r already exists", trimmed)
            raise
        except StoreError as exc:
            logger.error("Error adding therapist %r: %s", trimmed, exc)
            raise AddError(f"Could not add {trimmed}") from exc
        logger.info("Added therapist %r", trimmed)
        self.load()
        return trimmed

    def remove(self, name: str, *, confirmed: bool = False) -> bool:
        """Delete a therapist once the user has confirmed, then reload.

        Returns False when unconfirmed or when the store matched no row.
        """

        if not confirmed:
            return False
        try:
            deleted = self.store.delete_therapist(name)
        except StoreError as exc:
            logger.error("Error removing therapist %r: %s", name, exc)
            raise RemoveError(f"Could not remove {name}") from exc
        if deleted is False:
            logger.info("Therapist %r not on the roster; nothing removed", name)
            self.load()
            return False
        logger.info("Removed therapist %r", name)
        self.load()
        return True
