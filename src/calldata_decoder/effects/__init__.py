"""Effect analysis: what a call changes and how severe that is."""

from .analyzer import analyze, analyze_native_transfer
from .severity import (
    BUCKET_FOLD,
    SEVERITY_ORDER,
    SUMMARY_BUCKETS,
    bucket_counts,
    escalate,
    max_severity,
    severity_rank,
)

__all__ = [
    "BUCKET_FOLD",
    "SEVERITY_ORDER",
    "SUMMARY_BUCKETS",
    "analyze",
    "analyze_native_transfer",
    "bucket_counts",
    "escalate",
    "max_severity",
    "severity_rank",
]
