"""
Dense Bucket Tally

Shared accumulator behind the pipeline (by status) and aging (by days
overdue) reports. Buckets are created up front in canonical order, so a
bucket with no records still appears with zero count and zero value.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union
import math


def record_field(record: Any, name: str, default: Any = None) -> Any:
    """Read a field from a mapping or an attribute-style record."""
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def round_half_up(value: float, places: int = 0) -> Union[int, float]:
    """Round halves up (2.5 -> 3, 0.15 -> 0.2); returns an int when places is 0."""
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else float(rounded)


def as_amount(value: Any) -> float:
    """Monetary value of a record; missing, invalid or negative counts as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(amount) or amount < 0:
        return 0.0
    return amount


class BucketTally:
    """Ordered count/sum accumulator over a fixed set of bucket keys."""

    def __init__(self, keys: Iterable[str]):
        self._counts: Dict[str, int] = {}
        self._sums: Dict[str, float] = {}
        for key in keys:
            self._counts[key] = 0
            self._sums[key] = 0.0
        self.total_records = 0
        self.unmatched_records = 0

    def __contains__(self, key: Any) -> bool:
        return key in self._counts

    def add(self, key: Optional[str], amount: float = 0.0) -> bool:
        """
        Count one record.

        Returns:
            False when the key is not a bucket (record counted in totals only)
        """
        self.total_records += 1
        if key not in self._counts:
            self.unmatched_records += 1
            return False
        self._counts[key] += 1
        self._sums[key] += amount
        return True

    def count(self, key: str) -> int:
        return self._counts.get(key, 0)

    def value(self, key: str) -> float:
        return round(self._sums.get(key, 0.0), 2)

    def rows(self) -> Iterator[Tuple[str, int, float]]:
        """(key, count, value) for every bucket, in canonical order."""
        for key in self._counts:
            yield key, self._counts[key], self.value(key)

    @property
    def matched_value(self) -> float:
        return round(sum(self._sums.values()), 2)
