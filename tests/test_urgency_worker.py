"""
Tests for the urgency sweep: gauge value, one-time notification per report and
pruning of the seen set.
"""

import asyncio
from datetime import datetime, timedelta

from apps.workers.urgency_worker import SEEN_KEY, sweep_once
from core.db import AsyncSessionLocal
from core.metrics import urgent_reports_open
from core.validation import validate_report
from models import Report

T0 = datetime(2026, 3, 2, 9, 0, 0)


async def _add_report(**overrides):
    fields = validate_report(
        reporter_id=overrides.pop("reporter_id", "user-1"),
        reported_space_id="space-1",
        type=overrides.pop("type", "spam"),
        reason="reason",
        description="description",
        priority=overrides.pop("priority", None),
    )
    fields.update(created_at=T0, updated_at=T0, **overrides)
    async with AsyncSessionLocal() as db:
        report = Report(**fields)
        db.add(report)
        await db.commit()
        return report.id


async def _sweep(redis_client, now):
    async with AsyncSessionLocal() as db:
        return await sweep_once(db, redis_client, now)


def test_sweep_reports_newly_urgent_once(fake_redis):
    critical = asyncio.run(_add_report(type="scam"))
    high = asyncio.run(_add_report(type="harassment"))
    asyncio.run(_add_report(type="spam"))

    assert asyncio.run(_sweep(fake_redis, T0 + timedelta(days=1))) == [critical]
    assert urgent_reports_open._value.get() == 1

    later = T0 + timedelta(days=3)
    assert asyncio.run(_sweep(fake_redis, later)) == [high]
    assert urgent_reports_open._value.get() == 2
    assert fake_redis.sets[SEEN_KEY] == {str(critical), str(high)}

    # Nothing new on the next pass
    assert asyncio.run(_sweep(fake_redis, later)) == []


def test_sweep_ignores_closed_reports(fake_redis):
    asyncio.run(_add_report(type="scam", status="dismissed", resolved_at=T0, resolved_by="admin"))
    assert asyncio.run(_sweep(fake_redis, T0 + timedelta(days=5))) == []
    assert urgent_reports_open._value.get() == 0


async def _close(report_id):
    async with AsyncSessionLocal() as db:
        report = await db.get(Report, report_id)
        report.status = "resolved"
        report.resolved_at = T0 + timedelta(days=1)
        report.resolved_by = "admin"
        await db.commit()


def test_closed_report_leaves_seen_set(fake_redis):
    critical = asyncio.run(_add_report(type="scam"))
    other = asyncio.run(_add_report(type="safety_concern", reporter_id="user-2"))
    asyncio.run(_sweep(fake_redis, T0))
    assert fake_redis.sets[SEEN_KEY] == {str(critical), str(other)}

    asyncio.run(_close(critical))
    assert asyncio.run(_sweep(fake_redis, T0 + timedelta(days=1))) == []
    assert fake_redis.sets[SEEN_KEY] == {str(other)}
    assert urgent_reports_open._value.get() == 1
