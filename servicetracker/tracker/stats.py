"""Today's dashboard figures, recomputed from the store on every load."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Collection, Iterable

from .entry import DIGITAL_TENDERS
from .errors import FetchError, StoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardStats:
    today_entries: int = 0
    cash_total: float = 0.0
    digital_total: float = 0.0
    # Size of the roster when the stats were fetched.
    active_staff: int = 0
    # Distinct therapists with at least one entry today.
    staff_on_duty: int = 0
    window_start: dt.datetime | None = field(default=None, compare=False)

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["window_start"] = self.window_start.isoformat() if self.window_start else None
        return data


def today_start(now: dt.datetime) -> dt.datetime:
    """Return local midnight of ``now``'s date, keeping its timezone."""

    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def _amount(payment: dict, tender: str) -> float:
    return float(payment.get(tender) or 0)


def compute(
    entries: Iterable[dict],
    roster: Collection[str] = (),
    *,
    window_start: dt.datetime | None = None,
) -> DashboardStats:
    count = 0
    cash = 0.0
    digital = 0.0
    on_duty: set[str] = set()
    for entry in entries:
        payment = entry.get("payment") or {}
        count += 1
        cash += _amount(payment, "cash")
        digital += sum(_amount(payment, tender) for tender in DIGITAL_TENDERS)
        if entry.get("staff_name"):
            on_duty.add(entry["staff_name"])
    return DashboardStats(
        today_entries=count,
        cash_total=cash,
        digital_total=digital,
        active_staff=len(roster),
        staff_on_duty=len(on_duty),
        window_start=window_start,
    )


class StatsAggregator:
    """Fetches today's entries and keeps the latest :class:`DashboardStats`."""

    def __init__(
        self,
        store: Any,
        *,
        roster: Collection[str] = (),
        clock: Callable[[], dt.datetime] | None = None,
    ) -> None:
        self.store = store
        self.roster = roster
        self.clock = clock or (lambda: dt.datetime.now().astimezone())
        self.stats = DashboardStats()
        self.loading = False
        self.last_error: FetchError | None = None

    def load(self) -> bool:
        since = today_start(self.clock())
        self.loading = True
        try:
            entries = self.store.list_entries_since(since)
        except StoreError as exc:
            self.last_error = FetchError(f"Could not load today's entries: {exc}")
            logger.error("Error fetching entries since %s: %s", since.isoformat(), exc)
            return False
        finally:
            self.loading = False
        self.stats = compute(entries, self.roster, window_start=since)
        self.last_error = None
        return True
