"""
Receivable Aging

Buckets outstanding invoices by whole days past due, using the same dense
tally as the pipeline report.

Buckets (days overdue):
- current:  0 (not yet due, or no due date)
- 1_30:     1-30
- 31_60:    31-60
- 61_90:    61-90
- 90_plus:  91 and over
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union
import logging

from .buckets import BucketTally, as_amount, record_field

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime, str]

AGING_BUCKETS: Tuple[Tuple[str, str], ...] = (
    ("current", "Current"),
    ("1_30", "1-30 Days"),
    ("31_60", "31-60 Days"),
    ("61_90", "61-90 Days"),
    ("90_plus", "90+ Days"),
)

AGING_LABELS: Dict[str, str] = dict(AGING_BUCKETS)

_ONE_DAY = timedelta(days=1)


def classify_aging_bucket(days_overdue: int) -> str:
    """Map whole days overdue to its aging bucket key."""
    if days_overdue <= 0:
        return "current"
    if days_overdue <= 30:
        return "1_30"
    if days_overdue <= 60:
        return "31_60"
    if days_overdue <= 90:
        return "61_90"
    return "90_plus"


def to_utc_datetime(value: DateLike) -> datetime:
    """
    Normalize a date, datetime or ISO-8601 string to an aware UTC datetime.

    Dates map to midnight; naive datetimes are taken as UTC.

    Raises:
        ValueError: for strings that are not ISO-8601
        TypeError: for unsupported types
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    raise TypeError(f"Unsupported date value: {value!r}")


def days_overdue(due_date: Optional[DateLike], as_of: DateLike) -> int:
    """Whole days past due (floored), never negative; 0 without a due date."""
    if due_date is None or due_date == "":
        return 0
    elapsed = to_utc_datetime(as_of) - to_utc_datetime(due_date)
    return max(0, elapsed // _ONE_DAY)


@dataclass(frozen=True)
class AgingBucket:
    """One aging range: same shape as a pipeline bucket."""
    bucket_key: str
    label: str
    count: int
    amount: float

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "count": self.count, "total": self.amount}


@dataclass(frozen=True)
class AgedRecord:
    record: Any
    days_overdue: int
    bucket_key: str


@dataclass(frozen=True)
class AgingReport:
    as_of: datetime
    buckets: Tuple[AgingBucket, ...]
    total_count: int
    total_amount: float

    def bucket(self, key: str) -> Optional[AgingBucket]:
        for bucket in self.buckets:
            if bucket.bucket_key == key:
                return bucket
        return None

    @property
    def overdue_amount(self) -> float:
        return round(sum(b.amount for b in self.buckets if b.bucket_key != "current"), 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "as_of": self.as_of.isoformat(),
            "buckets": {b.bucket_key: b.to_dict() for b in self.buckets},
            "summary": {
                "total_count": self.total_count,
                "total_outstanding": self.total_amount,
                "total_overdue": self.overdue_amount,
            },
        }


class AgingBucketer:
    """Classifies receivables into fixed, non-overlapping day ranges."""

    def __init__(self, due_field: str = "due_date", amount_field: str = "amount"):
        self._due_field = due_field
        self._amount_field = amount_field

    def _days_overdue(self, record: Any, as_of: datetime) -> int:
        due = record_field(record, self._due_field)
        try:
            return days_overdue(due, as_of)
        except (TypeError, ValueError):
            logger.warning(f"Unparseable due date {due!r}; treating record as current")
            return 0

    def classify(self, records: Iterable[Any], as_of: DateLike) -> List[AgedRecord]:
        """Per-record days overdue and bucket, in input order."""
        as_of_dt = to_utc_datetime(as_of)
        aged = []
        for record in records:
            overdue = self._days_overdue(record, as_of_dt)
            aged.append(AgedRecord(record=record, days_overdue=overdue,
                                   bucket_key=classify_aging_bucket(overdue)))
        return aged

    def bucket_by_age(self, records: Iterable[Any], as_of: DateLike) -> AgingReport:
        """Dense aging report for a snapshot of receivables."""
        as_of_dt = to_utc_datetime(as_of)
        tally = BucketTally(key for key, _ in AGING_BUCKETS)

        for aged in self.classify(records, as_of_dt):
            tally.add(aged.bucket_key, as_amount(record_field(aged.record, self._amount_field)))

        buckets = tuple(
            AgingBucket(bucket_key=key, label=AGING_LABELS[key], count=count, amount=value)
            for key, count, value in tally.rows()
        )
        return AgingReport(
            as_of=as_of_dt,
            buckets=buckets,
            total_count=tally.total_records,
            total_amount=tally.matched_value,
        )
