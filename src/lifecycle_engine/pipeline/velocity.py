"""
Pipeline Velocity

Speed-of-progression analytics over lead stage history:
- time spent in each stage (average and median)
- conversion between consecutive funnel stages
- monthly cohorts (won / lost / still active)
- deal velocity: days from first entering the funnel to winning
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from statistics import mean, median
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
import logging

from ..status.statuses import LeadStatus
from ..status.transitions import status_key
from .aging import to_utc_datetime
from .buckets import record_field, round_half_up

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 1440

# Happy-path order used for stage-to-stage conversion
FUNNEL_PATH: Tuple[str, ...] = tuple(
    s.value for s in LeadStatus if s.is_open or s == LeadStatus.WON
)

_CLOSED_LOST = {LeadStatus.LOST.value, LeadStatus.ARCHIVED.value}


@dataclass(frozen=True)
class StageVelocity:
    stage: str
    avg_duration_minutes: int
    avg_duration_days: float
    median_duration_minutes: int
    total_leads: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage,
            "avg_duration_minutes": self.avg_duration_minutes,
            "avg_duration_days": self.avg_duration_days,
            "median_duration_minutes": self.median_duration_minutes,
            "total_leads": self.total_leads,
        }


@dataclass(frozen=True)
class ConversionStep:
    from_stage: str
    to_stage: str
    count: int
    percentage: int


@dataclass(frozen=True)
class Cohort:
    month: str
    total: int
    won: int
    lost: int
    active: int

    @property
    def conversion_rate(self) -> int:
        return round_half_up(self.won * 100 / self.total) if self.total else 0


@dataclass(frozen=True)
class DealVelocity:
    avg_days_to_close: int
    deals_analyzed: int


def _stage_order(stage: str, order: Sequence[str]) -> int:
    return order.index(stage) if stage in order else len(order)


def _positive_minutes(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        minutes = float(value)
    except (TypeError, ValueError):
        return None
    return minutes if minutes > 0 else None


def _created_at(record: Any) -> Optional[datetime]:
    value = record_field(record, "created_at")
    try:
        return to_utc_datetime(value)
    except (TypeError, ValueError):
        logger.warning(f"Skipping record with unusable created_at {value!r}")
        return None


class VelocityAnalyzer:
    """Computes velocity metrics from stage-history and lead snapshots."""

    def __init__(self, funnel_path: Sequence[str] = FUNNEL_PATH):
        self._path = tuple(funnel_path)

    def stage_velocity(self, history: Iterable[Any]) -> List[StageVelocity]:
        """Average/median minutes spent in each stage before leaving it."""
        durations: Dict[str, List[float]] = defaultdict(list)
        for entry in history:
            stage = status_key(record_field(entry, "from_stage")) or LeadStatus.NEW.value
            minutes = _positive_minutes(record_field(entry, "duration_minutes"))
            if minutes is not None:
                durations[stage].append(minutes)

        velocities = []
        for stage, values in durations.items():
            avg = mean(values)
            velocities.append(StageVelocity(
                stage=stage,
                avg_duration_minutes=round_half_up(avg),
                avg_duration_days=round_half_up(avg / MINUTES_PER_DAY, 1),
                median_duration_minutes=round_half_up(median(values)),
                total_leads=len(values),
            ))
        return sorted(velocities, key=lambda v: _stage_order(v.stage, self._path))

    def conversions(self, history: Sequence[Any]) -> List[ConversionStep]:
        """Share of exits from each stage that went to the next stage."""
        exits: Dict[str, int] = defaultdict(int)
        moves: Dict[Tuple[str, str], int] = defaultdict(int)
        for entry in history:
            from_stage = status_key(record_field(entry, "from_stage"))
            to_stage = status_key(record_field(entry, "to_stage"))
            if from_stage is None:
                continue
            exits[from_stage] += 1
            moves[(from_stage, to_stage)] += 1

        steps = []
        for from_stage, to_stage in zip(self._path, self._path[1:]):
            count = moves[(from_stage, to_stage)]
            steps.append(ConversionStep(
                from_stage=from_stage,
                to_stage=to_stage,
                count=count,
                percentage=round_half_up(count * 100 / max(exits[from_stage], 1)),
            ))
        return steps

    def cohorts(self, leads: Iterable[Any]) -> List[Cohort]:
        """Leads grouped by creation month (YYYY-MM), oldest first."""
        tallies: Dict[str, Dict[str, int]] = {}
        for lead in leads:
            created_at = _created_at(lead)
            if created_at is None:
                continue
            month = created_at.strftime("%Y-%m")
            tally = tallies.setdefault(month, {"total": 0, "won": 0, "lost": 0, "active": 0})
            tally["total"] += 1
            status = status_key(record_field(lead, "status"))
            if status == LeadStatus.WON.value:
                tally["won"] += 1
            elif status in _CLOSED_LOST:
                tally["lost"] += 1
            else:
                tally["active"] += 1
        return [Cohort(month=month, **tallies[month]) for month in sorted(tallies)]

    def deal_velocity(self, history: Iterable[Any], won_lead_ids: Iterable[str]) -> DealVelocity:
        """Average whole days from funnel entry to win, for currently won leads."""
        won = set(won_lead_ids)
        started: Dict[str, datetime] = {}
        spans: List[int] = []

        dated = []
        for entry in history:
            at = _created_at(entry)
            if at is not None:
                dated.append((at, entry))

        for at, entry in sorted(dated, key=lambda pair: pair[0]):
            lead_id = record_field(entry, "lead_id")
            from_stage = status_key(record_field(entry, "from_stage"))
            to_stage = status_key(record_field(entry, "to_stage"))
            if from_stage is None and to_stage == LeadStatus.NEW.value:
                started[lead_id] = at
            elif to_stage == LeadStatus.WON.value and lead_id in won and lead_id in started:
                days = round_half_up((at - started[lead_id]).total_seconds() / 86400)
                if days > 0:
                    spans.append(days)

        avg = round_half_up(mean(spans)) if spans else 0
        return DealVelocity(avg_days_to_close=avg, deals_analyzed=len(spans))
