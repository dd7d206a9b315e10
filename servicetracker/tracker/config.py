"""Deployment settings read from the Flask application config."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping
from zoneinfo import ZoneInfo


DEFAULTS: dict[str, Any] = {
    "TRACKER_TIMEZONE": "Asia/Kolkata",
    "TRACKER_PHONE_REQUIRED": True,
    "TRACKER_CURRENCY_SYMBOL": "₹",
    "TRACKER_AMOUNT_PRECISION": 2,
    "TRACKER_GROUPING": "indian",
    "TRACKER_THEME": "light",
    "TRACKER_LIVE_CLOCK": False,
}

GROUPINGS = ("indian", "western")


@dataclass(frozen=True)
class TrackerSettings:
    timezone: str = "Asia/Kolkata"
    phone_required: bool = True
    currency_symbol: str = "₹"
    amount_precision: int = 2
    grouping: str = "indian"
    theme: str = "light"
    live_clock: bool = False

    def __post_init__(self) -> None:
        if self.grouping not in GROUPINGS:
            raise ValueError(f"Unknown grouping {self.grouping!r}")
        if self.amount_precision < 0:
            raise ValueError("Amount precision cannot be negative")
        # Fails fast on an unknown zone name.
        ZoneInfo(self.timezone)

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "TrackerSettings":
        """Build settings from a Flask-style config mapping."""

        values = {**DEFAULTS, **{k: v for k, v in config.items() if k in DEFAULTS}}
        return cls(
            timezone=str(values["TRACKER_TIMEZONE"]),
            phone_required=_as_bool(values["TRACKER_PHONE_REQUIRED"]),
            currency_symbol=str(values["TRACKER_CURRENCY_SYMBOL"]),
            amount_precision=int(values["TRACKER_AMOUNT_PRECISION"]),
            grouping=str(values["TRACKER_GROUPING"]).lower(),
            theme=str(values["TRACKER_THEME"]),
            live_clock=_as_bool(values["TRACKER_LIVE_CLOCK"]),
        )


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)
