"""Value objects that make up a service entry."""

from __future__ import annotations

import datetime as dt
import math
import re
from dataclasses import dataclass, field
from typing import Any

TENDERS = ("cash", "card", "gpay", "upi")
DIGITAL_TENDERS = ("card", "gpay", "upi")
TIME_FIELDS = ("in_time", "out_time")

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def parse_amount(raw: Any) -> float:
    """Parse a tender amount, falling back to 0 for blank or garbage input."""

    if raw is None:
        return 0.0
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return 0.0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return value


def format_amount(
    value: float,
    *,
    symbol: str = "₹",
    precision: int = 2,
    grouping: str = "indian",
) -> str:
    """Format ``value`` as currency with Indian (1,00,000) or Western grouping."""

    sign = "-" if value < 0 and round(abs(value), precision) else ""
    if grouping == "western":
        body = f"{abs(value):,.{precision}f}"
    else:
        digits = f"{abs(value):.{precision}f}"
        whole, _, fraction = digits.partition(".")
        if len(whole) > 3:
            head, tail = whole[:-3], whole[-3:]
            groups: list[str] = []
            while len(head) > 2:
                groups.insert(0, head[-2:])
                head = head[:-2]
            if head:
                groups.insert(0, head)
            whole = ",".join(groups + [tail])
        body = f"{whole}.{fraction}" if fraction else whole
    return f"{sign}{symbol}{body}"


def format_clock_time(moment: dt.datetime) -> str:
    return f"{moment.hour:02d}:{moment.minute:02d}"


def is_valid_time(value: str) -> bool:
    """Return True for a zero-padded 24-hour ``HH:MM`` string."""

    return bool(_HHMM.match(value or ""))


@dataclass
class PaymentBreakdown:
    """Amounts received per tender. The total is always derived."""

    cash: float = 0.0
    card: float = 0.0
    gpay: float = 0.0
    upi: float = 0.0

    @property
    def total(self) -> float:
        return self.cash + self.card + self.gpay + self.upi

    @property
    def digital(self) -> float:
        return self.card + self.gpay + self.upi

    def set(self, method: str, raw: Any) -> float:
        if method not in TENDERS:
            raise KeyError(method)
        value = parse_amount(raw)
        setattr(self, method, value)
        return value

    def negative_tenders(self) -> list[str]:
        return [tender for tender in TENDERS if getattr(self, tender) < 0]

    def as_dict(self) -> dict[str, float]:
        return {tender: getattr(self, tender) for tender in TENDERS}


@dataclass
class TimeField:
    """An ``HH:MM`` value that can be typed in or stamped from the clock."""

    value: str = ""

    def set(self, value: str) -> None:
        self.value = (value or "").strip()

    def set_now(self, now: dt.datetime) -> str:
        self.value = format_clock_time(now)
        return self.value

    def clear(self) -> None:
        self.value = ""

    @property
    def is_blank(self) -> bool:
        return not self.value

    @property
    def is_valid(self) -> bool:
        return is_valid_time(self.value)

    def __str__(self) -> str:
        return self.value


@dataclass
class ServiceEntry:
    bill_no: str = ""
    customer_name: str = ""
    phone_no: str = ""
    staff_name: str = ""
    in_time: TimeField = field(default_factory=TimeField)
    out_time: TimeField = field(default_factory=TimeField)
    payment: PaymentBreakdown = field(default_factory=PaymentBreakdown)
    remarks: str = ""

    def to_record(self) -> dict[str, Any]:
        """Return the row shape the store inserts."""

        return {
            "bill_no": self.bill_no.strip(),
            "customer_name": self.customer_name.strip(),
            "phone_no": self.phone_no.strip(),
            "staff_name": self.staff_name,
            "in_time": self.in_time.value,
            "out_time": self.out_time.value,
            "payment": self.payment.as_dict(),
            "remarks": self.remarks.strip(),
        }
