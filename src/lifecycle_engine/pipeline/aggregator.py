"""
Pipeline Aggregator

Provides funnel reports and Kanban-style pipeline views by grouping
records on their current status.

Records with a status outside the table are still counted in the total
(and reported as unclassified) but never land in a bucket. Live data can
carry legacy or free-text statuses, and one stray row must not fail the
whole report.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional, Tuple
import logging

from ..status.transitions import LEAD_TRANSITIONS, TransitionTable, status_key
from .buckets import BucketTally, as_amount, record_field

logger = logging.getLogger(__name__)


def conversion_rate(successes: int, total: int) -> float:
    """Percentage of successes, rounded half-up to one decimal; 0 for no records."""
    if total <= 0:
        return 0.0
    rate = Decimal(successes) * 100 / Decimal(total)
    return float(rate.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class PipelineBucket:
    """One stage of a pipeline/funnel."""
    status_key: str
    label: str
    count: int
    aggregate_value: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status_key,
            "label": self.label,
            "count": self.count,
            "value": self.aggregate_value,
        }


@dataclass(frozen=True)
class PipelineReport:
    """Dense, ordered buckets plus summary statistics."""
    buckets: Tuple[PipelineBucket, ...]
    total_records: int
    unclassified_count: int
    success_status: Optional[str]
    success_count: int
    matched_value_sum: float
    total_value: float
    conversion_rate: float

    def bucket(self, status: Any) -> Optional[PipelineBucket]:
        key = status_key(status)
        for bucket in self.buckets:
            if bucket.status_key == key:
                return bucket
        return None

    @property
    def stages_with_records(self) -> List[str]:
        return [b.status_key for b in self.buckets if b.count > 0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "funnel": [b.to_dict() for b in self.buckets],
            "summary": {
                "total_leads": self.total_records,
                "won_count": self.success_count,
                "conversion_rate": self.conversion_rate,
                "won_value": self.matched_value_sum,
                "total_pipeline_value": self.total_value,
                "unclassified": self.unclassified_count,
            },
        }


@dataclass(frozen=True)
class PipelineColumn:
    """Kanban column: a stage and the records currently in it."""
    status_key: str
    label: str
    records: Tuple[Any, ...]

    @property
    def count(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class PipelineBoard:
    columns: Tuple[PipelineColumn, ...]
    unclassified: Tuple[Any, ...] = ()


class PipelineAggregator:
    """
    Groups records by status in the table's canonical order.

    Records may be mappings or objects; the status and value are read from
    the configured field names.
    """

    def __init__(
        self,
        table: TransitionTable = LEAD_TRANSITIONS,
        status_field: str = "status",
        value_field: str = "value",
    ):
        self._table = table
        self._status_field = status_field
        self._value_field = value_field

    @property
    def table(self) -> TransitionTable:
        return self._table

    def _status_of(self, record: Any) -> Optional[str]:
        return status_key(record_field(record, self._status_field))

    def aggregate(self, records: Iterable[Any]) -> PipelineReport:
        """Build the dense funnel report for a snapshot of records."""
        tally = BucketTally(self._table.order)
        unknown_statuses = set()

        for record in records:
            status = self._status_of(record)
            matched = tally.add(status, as_amount(record_field(record, self._value_field)))
            if not matched:
                unknown_statuses.add(str(status))

        if unknown_statuses:
            logger.warning(
                f"{tally.unmatched_records} {self._table.kind.value} record(s) with "
                f"unrecognized status excluded from buckets: {sorted(unknown_statuses)[:5]}"
            )

        buckets = tuple(
            PipelineBucket(
                status_key=key,
                label=self._table.label(key),
                count=count,
                aggregate_value=value,
            )
            for key, count, value in tally.rows()
        )

        success = self._table.success_status
        success_count = tally.count(success) if success else 0

        return PipelineReport(
            buckets=buckets,
            total_records=tally.total_records,
            unclassified_count=tally.unmatched_records,
            success_status=success,
            success_count=success_count,
            matched_value_sum=tally.value(success) if success else 0.0,
            total_value=tally.matched_value,
            conversion_rate=conversion_rate(success_count, tally.total_records),
        )

    def board(self, records: Iterable[Any]) -> PipelineBoard:
        """Kanban view: every stage with its records, in canonical order."""
        columns: Dict[str, List[Any]] = {key: [] for key in self._table.order}
        unclassified: List[Any] = []

        for record in records:
            status = self._status_of(record)
            if status in columns:
                columns[status].append(record)
            else:
                unclassified.append(record)

        return PipelineBoard(
            columns=tuple(
                PipelineColumn(status_key=key, label=self._table.label(key), records=tuple(items))
                for key, items in columns.items()
            ),
            unclassified=tuple(unclassified),
        )


def build_funnel(records: Iterable[Any], table: TransitionTable = LEAD_TRANSITIONS) -> Dict[str, Any]:
    """Funnel report as the JSON-ready dict returned to dashboards."""
    return PipelineAggregator(table).aggregate(records).to_dict()
