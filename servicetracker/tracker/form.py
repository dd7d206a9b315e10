"""The service entry form: field edits, validation and submission."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Callable, Container, Mapping

from .config import TrackerSettings
from .entry import TENDERS, TIME_FIELDS, ServiceEntry, format_amount
from .errors import StoreError, SubmissionError, ValidationError

logger = logging.getLogger(__name__)

SCALAR_FIELDS = (
    "bill_no",
    "customer_name",
    "phone_no",
    "staff_name",
    "in_time",
    "out_time",
    "remarks",
)

FIELD_LABELS = {
    "bill_no": "Bill number",
    "customer_name": "Customer name",
    "phone_no": "Phone number",
    "in_time": "In time",
    "out_time": "Out time",
}


class ServiceEntryForm:
    """Holds one in-progress entry and turns it into a stored record.

    Nothing is validated while fields are edited; :meth:`submit` checks the
    whole entry before the store is touched and keeps the user's input if the
    store rejects it.
    """

    def __init__(
        self,
        store: Any,
        *,
        roster: Container[str],
        settings: TrackerSettings | None = None,
        clock: Callable[[], dt.datetime] | None = None,
        on_saved: Callable[[dict], None] | None = None,
    ) -> None:
        self.store = store
        self.roster = roster
        self.settings = settings or TrackerSettings()
        self.clock = clock or (lambda: dt.datetime.now(self.settings.tzinfo))
        self.on_saved = on_saved
        self.entry = ServiceEntry()
        self.submitting = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], store: Any, **kwargs: Any) -> "ServiceEntryForm":
        """Rebuild a form from flat posted data (field names plus tender names)."""

        form = cls(store, **kwargs)
        for name in SCALAR_FIELDS:
            if name in data:
                form.update_field(name, data[name])
        for method in TENDERS:
            if method in data:
                form.update_payment(method, data[method])
        return form

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------
    def update_field(self, name: str, value: Any) -> None:
        if name not in SCALAR_FIELDS:
            raise ValidationError(f"Unknown field {name!r}", field=name)
        value = "" if value is None else str(value)
        if name in TIME_FIELDS:
            getattr(self.entry, name).set(value)
        else:
            setattr(self.entry, name, value)

    def update_payment(self, method: str, raw_value: Any) -> float:
        try:
            return self.entry.payment.set(method, raw_value)
        except KeyError:
            raise ValidationError(
                f"Unknown payment method {method!r}", field=f"payment.{method}"
            ) from None

    def set_time_now(self, field: str) -> str:
        """Stamp ``in_time`` or ``out_time`` with the current wall-clock time."""

        if field not in TIME_FIELDS:
            raise ValidationError(f"{field!r} is not a time field", field=field)
        return getattr(self.entry, field).set_now(self.clock())

    def reset(self) -> None:
        self.entry = ServiceEntry()

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------
    @property
    def total_received(self) -> float:
        return self.entry.payment.total

    @property
    def formatted_total(self) -> str:
        return format_amount(
            self.total_received,
            symbol=self.settings.currency_symbol,
            precision=self.settings.amount_precision,
            grouping=self.settings.grouping,
        )

    def payload(self) -> dict[str, Any]:
        return self.entry.to_record()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "bill_no": self.entry.bill_no,
            "customer_name": self.entry.customer_name,
            "phone_no": self.entry.phone_no,
            "staff_name": self.entry.staff_name,
            "in_time": self.entry.in_time.value,
            "out_time": self.entry.out_time.value,
            "remarks": self.entry.remarks,
        }
        data.update(self.entry.payment.as_dict())
        return data

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------
    def validate(self) -> None:
        entry = self.entry
        if not entry.staff_name:
            raise ValidationError("staff required", field="staff_name")
        if entry.staff_name not in self.roster:
            raise ValidationError(
                f"{entry.staff_name} is not on the therapist roster", field="staff_name"
            )
        required = ["bill_no", "customer_name"]
        if self.settings.phone_required:
            required.append("phone_no")
        for name in required:
            if not getattr(entry, name).strip():
                raise ValidationError(f"{FIELD_LABELS[name]} is required", field=name)
        if entry.in_time.is_blank:
            raise ValidationError("In time is required", field="in_time")
        for name in TIME_FIELDS:
            time_field = getattr(entry, name)
            if not time_field.is_blank and not time_field.is_valid:
                raise ValidationError(
                    f"{FIELD_LABELS[name]} must be HH:MM (24-hour)", field=name
                )
        negative = entry.payment.negative_tenders()
        if negative:
            tender = negative[0]
            raise ValidationError(
                f"{tender.upper()} amount cannot be negative", field=f"payment.{tender}"
            )

    def submit(self) -> dict | None:
        """Validate, store and reset. Returns the stored record.

        Returns ``None`` without touching the store while an earlier submit
        is still in flight.
        """

        if self.submitting:
            logger.warning("Submit ignored; a submission is already in progress")
            return None
        self.validate()
        record = self.payload()
        self.submitting = True
        try:
            saved = self.store.insert_entry(record)
        except StoreError as exc:
            logger.error("Failed to save entry for bill %s: %s", record["bill_no"], exc)
            raise SubmissionError("Failed to save entry. Please try again.") from exc
        finally:
            self.submitting = False
        logger.info("Saved entry for bill %s (%s)", record["bill_no"], record["staff_name"])
        self.reset()
        if self.on_saved is not None:
            self.on_saved(saved)
        return saved
