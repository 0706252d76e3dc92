"""Severity ordering, escalation, and batch fold rules."""

from typing import Dict, Iterable

from ..models import Severity

# Total order for definite findings. UNKNOWN sits outside it.
SEVERITY_ORDER = [
    Severity.OK,
    Severity.WARN,
    Severity.DANGER,
    Severity.HIGH,
    Severity.CRITICAL,
]

SUMMARY_BUCKETS = ["OK", "WARN", "DANGER", "UNKNOWN"]

BUCKET_FOLD = {
    Severity.OK: "OK",
    Severity.WARN: "WARN",
    Severity.DANGER: "DANGER",
    Severity.HIGH: "DANGER",
    Severity.CRITICAL: "DANGER",
    Severity.UNKNOWN: "UNKNOWN",
}


def severity_rank(severity: Severity) -> int:
    """Rank of a definite severity, -1 for UNKNOWN."""
    if severity == Severity.UNKNOWN:
        return -1
    return SEVERITY_ORDER.index(severity)


def escalate(severity: Severity) -> Severity:
    """Move one step toward CRITICAL. UNKNOWN and CRITICAL are unchanged."""
    rank = severity_rank(severity)
    if rank < 0 or rank >= len(SEVERITY_ORDER) - 1:
        return severity
    return SEVERITY_ORDER[rank + 1]


def max_severity(severities: Iterable[Severity]) -> Severity:
    """
    Aggregate severities for a batch.

    Any UNKNOWN dominates. Otherwise the most severe value wins.
    An empty input aggregates to OK.
    """
    result = Severity.OK
    for severity in severities:
        if severity == Severity.UNKNOWN:
            return Severity.UNKNOWN
        if severity_rank(severity) > severity_rank(result):
            result = severity
    return result


def bucket_counts(severities: Iterable[Severity]) -> Dict[str, int]:
    counts = {bucket: 0 for bucket in SUMMARY_BUCKETS}
    for severity in severities:
        counts[BUCKET_FOLD[severity]] += 1
    return counts
