"""
Moderation rules for reports: priority escalation, status workflow and derived reads.

Everything here is a pure function of report state. Derived values (`days_open`,
`is_urgent`) are recomputed on every read and never written back.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Any

from core.enums import CLOSED_REPORT_STATUSES, REPORT_PRIORITIES

CRITICAL_TYPES = frozenset({"scam", "safety_concern", "fraudulent_activity"})
HIGH_TYPES = frozenset({"fake_listing", "harassment"})

# Allowed report status moves; closed statuses are terminal
REPORT_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"under_review", "resolved", "dismissed"}),
    "under_review": frozenset({"pending", "resolved", "dismissed"}),
    "resolved": frozenset(),
    "dismissed": frozenset(),
}

URGENT_HIGH_AFTER_DAYS = 2

_ONE_DAY = timedelta(days=1)


def utcnow() -> datetime:
    """Current time as naive UTC, matching what the database stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    """Normalise an aware datetime to naive UTC; naive values are assumed UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def escalated_priority(report_type: str, current: str) -> str:
    """
    Priority implied by a report type.

    Critical and high types escalate; any other type leaves `current` unchanged.
    """
    if report_type in CRITICAL_TYPES:
        return "critical"
    if report_type in HIGH_TYPES:
        return "high"
    return current


def initial_priority(report_type: str, explicit: str | None, default: str) -> tuple[str, bool]:
    """
    Priority for a new report.

    Returns:
        (priority, priority_explicit)
    """
    if explicit is not None:
        return explicit, True
    return escalated_priority(report_type, default), False


def apply_type_change(report: Any, new_type: str, explicit_priority: str | None = None) -> bool:
    """
    Reclassify a report, escalating its priority when the caller did not choose one.

    The escalation rule fires only when the type actually changes, this mutation
    carries no explicit priority, and no explicit priority was ever recorded.

    Returns:
        True if the priority was changed by escalation.
    """
    if explicit_priority is not None:
        report.priority = explicit_priority
        report.priority_explicit = True

    if new_type == report.type:
        return False

    report.type = new_type
    if explicit_priority is not None or report.priority_explicit:
        return False

    escalated = escalated_priority(new_type, report.priority)
    if escalated == report.priority:
        return False
    report.priority = escalated
    return True


def can_transition(current: str, target: str) -> bool:
    return target in REPORT_TRANSITIONS.get(current, frozenset())


def is_closed(status: str) -> bool:
    return status in CLOSED_REPORT_STATUSES


def days_open(report: Any, now: datetime) -> int:
    """Whole days (rounded up) a report has been open, up to resolution when closed."""
    created = as_naive_utc(report.created_at)
    end = as_naive_utc(now)
    if is_closed(report.status) and report.resolved_at is not None:
        end = as_naive_utc(report.resolved_at)
    return math.ceil((end - created) / _ONE_DAY)


def is_urgent(report: Any, now: datetime) -> bool:
    if report.priority == "critical":
        return True
    return report.priority == "high" and days_open(report, now) > URGENT_HIGH_AFTER_DAYS


def priority_rank(priority: str) -> int:
    return REPORT_PRIORITIES.index(priority)


def triage_key(report: Any, now: datetime) -> tuple[int, int, datetime]:
    """Sort key for the moderation queue: urgent first, then severity, then oldest."""
    return (
        0 if is_urgent(report, now) else 1,
        -priority_rank(report.priority),
        as_naive_utc(report.created_at),
    )
