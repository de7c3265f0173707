"""
Pipeline Reporting

Dense, ordered aggregations over record snapshots:
- Funnel / Kanban pipeline by status
- Receivable aging by days overdue
- Velocity through the funnel
"""

from .buckets import BucketTally, as_amount, record_field
from .aggregator import (
    PipelineAggregator,
    PipelineBucket,
    PipelineReport,
    PipelineBoard,
    PipelineColumn,
    build_funnel,
    conversion_rate,
)
from .aging import (
    AgingBucketer,
    AgingBucket,
    AgingReport,
    AgedRecord,
    AGING_BUCKETS,
    classify_aging_bucket,
    days_overdue,
)
from .velocity import (
    VelocityAnalyzer,
    StageVelocity,
    ConversionStep,
    Cohort,
    DealVelocity,
    FUNNEL_PATH,
)

__all__ = [
    "BucketTally",
    "as_amount",
    "record_field",
    "PipelineAggregator",
    "PipelineBucket",
    "PipelineReport",
    "PipelineBoard",
    "PipelineColumn",
    "build_funnel",
    "conversion_rate",
    "AgingBucketer",
    "AgingBucket",
    "AgingReport",
    "AgedRecord",
    "AGING_BUCKETS",
    "classify_aging_bucket",
    "days_overdue",
    "VelocityAnalyzer",
    "StageVelocity",
    "ConversionStep",
    "Cohort",
    "DealVelocity",
    "FUNNEL_PATH",
]
