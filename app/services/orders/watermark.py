"""
Watermark trackers for incremental shipment polling.

ShipStation timestamps are unreliable in two ways, one per tracker:
- CreateDateWatermark: CreateDate is recorded in Pacific local time but labelled
  UTC, so "now" is shifted by a fixed offset before being used as the next bound.
- ModifyDateWatermark: only the date part of ModifyDate can be trusted, so the
  window always starts at UTC midnight and consecutive polls overlap. Consumers
  of the shipment feed must therefore be idempotent.

Both never return a watermark earlier than the one they were given.
"""

from datetime import UTC, datetime, timedelta
from typing import Any, Optional

from app.db.shipstation.filters import Filter, Predicate
from app.utils.error_handler import ValidationException


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def start_of_utc_day(moment: datetime) -> datetime:
    return _as_utc(moment).replace(hour=0, minute=0, second=0, microsecond=0)


def parse_since(value: Any, now: Optional[datetime] = None) -> datetime:
    """
    Parse the ``since`` parameter sent by the Hub.

    Naive values are taken as UTC. A missing value starts at the beginning of
    the current UTC day.

    Raises:
        ValidationException: If the value is not an ISO-8601 timestamp
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return start_of_utc_day(now or datetime.now(UTC))
    if isinstance(value, datetime):
        return _as_utc(value)
    try:
        return _as_utc(datetime.fromisoformat(str(value).strip().replace("Z", "+00:00")))
    except ValueError as e:
        raise ValidationException(
            message=f"Invalid since parameter: {value}",
            field="since",
            invalid_value=value,
            expected_format="ISO-8601 timestamp",
        ) from e


def format_watermark(moment: datetime) -> str:
    """ISO-8601 extended format in UTC, e.g. ``2023-01-01T00:00:00Z``."""
    return _as_utc(moment).isoformat(timespec="seconds").replace("+00:00", "Z")


class CreateDateWatermark:
    """Sub-day resolution polling on Shipments.CreateDate."""

    def __init__(self, offset_hours: float = -7.0):
        """
        Args:
            offset_hours: Correction added to "now" (ShipStation's local offset from UTC)
        """
        self.offset = timedelta(hours=offset_hours)

    def build_filter(self, since: datetime) -> Filter:
        return Predicate("CreateDate", "ge", _as_utc(since))

    def next_watermark(self, since: datetime, now: Optional[datetime] = None) -> datetime:
        candidate = _as_utc(now or datetime.now(UTC)) + self.offset
        return max(candidate, _as_utc(since))


class ModifyDateWatermark:
    """Date-only resolution polling on Shipments.ModifyDate, shipped records only."""

    def build_filter(self, since: datetime) -> Filter:
        return Predicate("ModifyDate", "ge", start_of_utc_day(since)) & Predicate("ShipDate", "ne", None)

    def next_watermark(self, since: datetime, now: Optional[datetime] = None) -> datetime:
        candidate = start_of_utc_day(now or datetime.now(UTC))
        return max(candidate, _as_utc(since))


def create_watermark_tracker(mode: str, offset_hours: float = -7.0):
    """
    Build the tracker for the configured poll mode.

    Args:
        mode: "modified" (date-only ModifyDate) or "created" (CreateDate with offset)
        offset_hours: CreateDate timezone correction

    Returns:
        ModifyDateWatermark | CreateDateWatermark
    """
    if mode == "modified":
        return ModifyDateWatermark()
    if mode == "created":
        return CreateDateWatermark(offset_hours=offset_hours)
    raise ValueError(f"Unknown poll mode: {mode}")
