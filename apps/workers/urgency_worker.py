"""Urgency worker: periodically re-derives report urgency for the moderation team."""

import asyncio
import logging
from datetime import datetime

import redis.asyncio as redis
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.db import AsyncSessionLocal
from core.enums import OPEN_REPORT_STATUSES
from core.metrics import urgent_reports_open
from core.moderation import days_open, is_urgent, utcnow
from core.redis import get_redis
from models import Report

logger = logging.getLogger(__name__)

SEEN_KEY = "reports:urgent:seen"


async def sweep_once(db: AsyncSession, redis_client: redis.Redis, now: datetime) -> list[int]:
    """
    Recompute urgency for every open report.

    Sets the `urgent_reports_open` gauge and logs each report the first time it is
    seen urgent. Reports no longer urgent leave the seen set. Nothing is written to
    the reports table.

    Returns:
        Ids of reports that became urgent since the previous sweep
    """
    result = await db.execute(select(Report).where(Report.status.in_(OPEN_REPORT_STATUSES)))
    urgent = [r for r in result.scalars().all() if is_urgent(r, now)]
    urgent_reports_open.set(len(urgent))

    newly_urgent = []
    for report in urgent:
        if await redis_client.sadd(SEEN_KEY, str(report.id)):
            newly_urgent.append(report.id)
            logger.warning(
                f"Urgent report {report.id}: type={report.type}, priority={report.priority}, "
                f"days_open={days_open(report, now)}"
            )

    # Drop reports that were closed or de-escalated since the last sweep
    current = {str(report.id) for report in urgent}
    stale = set(await redis_client.smembers(SEEN_KEY)) - current
    if stale:
        await redis_client.srem(SEEN_KEY, *stale)
    return newly_urgent


class UrgencyWorker:
    """Worker that sweeps open reports on a fixed interval."""

    def __init__(self, interval_seconds: int | None = None) -> None:
        self.running = False
        self.interval_seconds = interval_seconds or settings.urgency_sweep_interval_seconds

    async def start(self) -> None:
        """Start the urgency worker."""
        self.running = True
        redis_client = await get_redis()
        logger.info(f"Urgency worker started, sweeping every {self.interval_seconds}s")

        while self.running:
            try:
                async with AsyncSessionLocal() as db:
                    newly_urgent = await sweep_once(db, redis_client, utcnow())
                if newly_urgent:
                    logger.info(f"Sweep found {len(newly_urgent)} newly urgent report(s)")
            except Exception as e:
                logger.error(f"Error in urgency worker loop: {e}")

            await asyncio.sleep(self.interval_seconds)

    async def stop(self) -> None:
        """Stop the urgency worker."""
        self.running = False


async def main() -> None:
    """Run urgency worker."""
    logging.basicConfig(level=settings.log_level.upper())
    worker = UrgencyWorker()
    try:
        await worker.start()
    except KeyboardInterrupt:
        await worker.stop()


if __name__ == "__main__":
    asyncio.run(main())
