"""Core orchestration logic for the spa service tracker."""

from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path
from typing import Any, Callable, Mapping

from .clock import ClockTicker, clock_display
from .config import TrackerSettings
from .entry import format_amount
from .form import ServiceEntryForm
from .roster import RosterStore
from .stats import DashboardStats, StatsAggregator
from .store import EntryStore

logger = logging.getLogger(__name__)


class ServiceTracker:
    """High level façade that wires the roster, stats and entry forms together.

    Consistency policy: nothing is merged locally after a write. Every
    successful submit, add or remove re-fetches from the store.
    """

    def __init__(
        self,
        store: Any = None,
        *,
        db_path: str | Path = ":memory:",
        settings: TrackerSettings | None = None,
        clock: Callable[[], dt.datetime] | None = None,
    ) -> None:
        self.settings = settings or TrackerSettings()
        self._owns_store = store is None
        self.store = EntryStore(db_path) if store is None else store
        self.clock = clock or (lambda: dt.datetime.now(self.settings.tzinfo))
        self.roster = RosterStore(self.store)
        self.aggregator = StatsAggregator(self.store, roster=self.roster, clock=self.clock)
        self.current_time = self.clock()
        self.ticker = ClockTicker(self.tick, clock=self.clock)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def mount(self, *, live_clock: bool | None = None) -> bool:
        """Load roster and stats, optionally starting the header clock."""

        ok = self.refresh()
        if live_clock is None:
            live_clock = self.settings.live_clock
        if live_clock:
            self.ticker.start()
        return ok

    def refresh(self) -> bool:
        roster_ok = self.roster.load()
        stats_ok = self.aggregator.load()
        return roster_ok and stats_ok

    def close(self) -> None:
        self.ticker.stop()
        if self._owns_store:
            self.store.close()

    def tick(self, moment: dt.datetime | None = None) -> None:
        """Advance the displayed time; the ticker calls this every second."""

        self.current_time = moment or self.clock()

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------
    @property
    def stats(self) -> DashboardStats:
        return self.aggregator.stats

    @property
    def loading(self) -> bool:
        return self.roster.loading or self.aggregator.loading

    @property
    def therapists(self) -> list[str]:
        return list(self.roster.names)

    def format_amount(self, value: float) -> str:
        return format_amount(
            value,
            symbol=self.settings.currency_symbol,
            precision=self.settings.amount_precision,
            grouping=self.settings.grouping,
        )

    def clock_display(self) -> dict[str, str]:
        return clock_display(self.current_time)

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------
    def new_form(self, data: Mapping[str, Any] | None = None) -> ServiceEntryForm:
        """Return a form bound to this tracker's store, roster and clock."""

        return ServiceEntryForm.from_mapping(
            data or {},
            self.store,
            roster=self.roster,
            settings=self.settings,
            clock=self.clock,
            on_saved=self._after_entry_saved,
        )

    def _after_entry_saved(self, record: dict) -> None:
        self.refresh()

    def add_therapist(self, name: str) -> str | None:
        added = self.roster.add(name)
        if added:
            self.aggregator.load()
        return added

    def remove_therapist(self, name: str, *, confirmed: bool = False) -> bool:
        removed = self.roster.remove(name, confirmed=confirmed)
        if removed:
            self.aggregator.load()
        return removed
