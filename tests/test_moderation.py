"""
Tests for core.moderation:
- Priority escalation on creation and on reclassification
- days_open / is_urgent derivation
- Status workflow and triage ordering
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from core import moderation

T0 = datetime(2026, 1, 10, 12, 0, 0)


def make_report(**overrides):
    fields = {
        "type": "spam",
        "status": "pending",
        "priority": "medium",
        "priority_explicit": False,
        "created_at": T0,
        "resolved_at": None,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


# ────────────────────────────────
# Escalation
# ────────────────────────────────
@pytest.mark.parametrize("report_type", ["scam", "safety_concern", "fraudulent_activity"])
def test_critical_types_escalate_to_critical(report_type):
    assert moderation.escalated_priority(report_type, "medium") == "critical"


@pytest.mark.parametrize("report_type", ["fake_listing", "harassment"])
def test_high_types_escalate_to_high(report_type):
    assert moderation.escalated_priority(report_type, "medium") == "high"


def test_other_types_leave_priority_unchanged():
    assert moderation.escalated_priority("spam", "low") == "low"
    assert moderation.escalated_priority("other", "medium") == "medium"


def test_initial_priority_without_explicit_value_escalates():
    assert moderation.initial_priority("scam", None, "medium") == ("critical", False)


def test_initial_priority_keeps_explicit_medium():
    """An explicit medium on a scam report is not overwritten."""
    assert moderation.initial_priority("scam", "medium", "medium") == ("medium", True)


def test_type_change_escalates_when_priority_never_chosen():
    report = make_report(type="spam")
    assert moderation.apply_type_change(report, "harassment") is True
    assert report.type == "harassment"
    assert report.priority == "high"


def test_type_change_respects_recorded_explicit_priority():
    report = make_report(type="spam", priority="medium", priority_explicit=True)
    assert moderation.apply_type_change(report, "scam") is False
    assert report.type == "scam"
    assert report.priority == "medium"


def test_type_change_with_explicit_priority_in_same_mutation():
    report = make_report(type="spam")
    assert moderation.apply_type_change(report, "scam", explicit_priority="low") is False
    assert report.priority == "low"
    assert report.priority_explicit is True


def test_same_type_does_not_fire_rule():
    report = make_report(type="scam", priority="low")
    assert moderation.apply_type_change(report, "scam") is False
    assert report.priority == "low"


def test_type_change_to_plain_type_leaves_priority():
    report = make_report(type="scam", priority="critical")
    assert moderation.apply_type_change(report, "spam") is False
    assert report.priority == "critical"


# ────────────────────────────────
# Derived reads
# ────────────────────────────────
def test_days_open_for_resolved_report_uses_resolution_time():
    report = make_report(status="resolved", resolved_at=T0 + timedelta(days=3))
    assert moderation.days_open(report, T0 + timedelta(days=30)) == 3


def test_days_open_rounds_up_for_open_report():
    report = make_report()
    assert moderation.days_open(report, T0 + timedelta(days=1, hours=12)) == 2


def test_days_open_for_dismissed_report():
    report = make_report(status="dismissed", resolved_at=T0 + timedelta(hours=5))
    assert moderation.days_open(report, T0 + timedelta(days=10)) == 1


def test_days_open_accepts_aware_now():
    report = make_report()
    now = (T0 + timedelta(days=2)).replace(tzinfo=timezone.utc)
    assert moderation.days_open(report, now) == 2


def test_critical_is_urgent_regardless_of_age():
    report = make_report(priority="critical")
    assert moderation.is_urgent(report, T0) is True


def test_high_is_not_urgent_at_two_days():
    report = make_report(priority="high")
    assert moderation.is_urgent(report, T0 + timedelta(days=2)) is False


def test_high_is_urgent_at_three_days():
    report = make_report(priority="high")
    assert moderation.is_urgent(report, T0 + timedelta(days=3)) is True


def test_medium_is_never_urgent():
    report = make_report(priority="medium")
    assert moderation.is_urgent(report, T0 + timedelta(days=60)) is False


# ────────────────────────────────
# Workflow and triage
# ────────────────────────────────
def test_closed_statuses_are_terminal():
    assert moderation.can_transition("pending", "under_review")
    assert moderation.can_transition("under_review", "resolved")
    assert not moderation.can_transition("resolved", "pending")
    assert not moderation.can_transition("dismissed", "under_review")


def test_triage_key_orders_urgent_then_priority_then_age():
    now = T0 + timedelta(days=5)
    stale_high = make_report(priority="high", created_at=T0)
    fresh_high = make_report(priority="high", created_at=now - timedelta(hours=1))
    critical = make_report(priority="critical", created_at=now - timedelta(hours=2))
    low = make_report(priority="low", created_at=T0 - timedelta(days=9))

    ordered = sorted([low, fresh_high, stale_high, critical], key=lambda r: moderation.triage_key(r, now))

    assert ordered == [critical, stale_high, fresh_high, low]
