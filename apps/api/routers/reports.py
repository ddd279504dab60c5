"""Report filing endpoints for marketplace users."""

import logging
import time
from datetime import datetime
from typing import Any

import redis.asyncio as redis
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from apps.api.deps import get_db, get_now, get_redis_client
from apps.api.schemas import ReportOut
from core.auth import user_auth
from core.config import settings
from core.errors import ValidationError
from core.metrics import reports_escalated_total, reports_latency_seconds, reports_rejected_total, reports_total
from core.redis import acquire_cooldown
from core.validation import validate_report
from models import Report

router = APIRouter(prefix="/reports", tags=["reports"])
logger = logging.getLogger(__name__)


class ReportIn(BaseModel):
    """Input model for filing a report. Exactly one target id must be given."""

    reported_space_id: str | None = None
    reported_user_id: str | None = None
    type: str | None = None  # see core.enums.REPORT_TYPES
    reason: str | None = None
    description: str | None = None
    evidence: list[str] | None = None
    priority: str | None = None  # low|medium|high|critical, derived from type when omitted


@router.get("/test")
async def reports_mounted() -> dict[str, Any]:
    """Route-mounting check."""
    return {"success": True, "message": "Report routes are mounted and accessible!"}


@router.get("")
async def list_reports() -> JSONResponse:
    """Report listing for end users is not available."""
    return JSONResponse(
        status_code=status.HTTP_501_NOT_IMPLEMENTED,
        content={"success": False, "message": "Report routes not implemented yet"},
    )


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ReportOut)
async def create_report(
    body: ReportIn,
    db: AsyncSession = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis_client),
    caller: str = Depends(user_auth),
    now: datetime = Depends(get_now),
) -> ReportOut:
    """
    File a report against a space or a user.

    Validates:
    - Exactly one of reported_space_id / reported_user_id
    - Type, priority and text fields (see core.validation.validate_report)
    - Rate limit: 1 report per `report_rate_limit_seconds` per reporter

    Args:
        body: Report details
        db: Database session
        redis_client: Redis client for the rate limit
        caller: User id of the reporter (from user_auth)
        now: Request time

    Returns:
        The stored report with derived fields

    Raises:
        ValidationError: On invalid report fields
        HTTPException: 429 when the reporter is rate limited
    """
    t0 = time.perf_counter()
    try:
        try:
            fields = validate_report(
                reporter_id=caller,
                reported_space_id=body.reported_space_id,
                reported_user_id=body.reported_user_id,
                type=body.type,
                reason=body.reason,
                description=body.description,
                evidence=body.evidence,
                priority=body.priority,
            )
        except ValidationError:
            reports_rejected_total.labels(reason="validation").inc()
            raise

        cooldown_key = f"rl:report:{caller}"
        if not await acquire_cooldown(redis_client, cooldown_key, settings.report_rate_limit_seconds):
            reports_rejected_total.labels(reason="rate_limited").inc()
            raise HTTPException(429, "Too many reports. Please wait before reporting again.")

        report = Report(**fields, created_at=now, updated_at=now)
        db.add(report)
        try:
            await db.commit()
        except Exception:
            # Nothing was stored; release the cooldown
            await db.rollback()
            await redis_client.delete(cooldown_key)
            raise
        await db.refresh(report)

        # Metrics
        reports_total.labels(type=report.type).inc()
        if not report.priority_explicit and report.priority != "medium":
            reports_escalated_total.labels(priority=report.priority).inc()

        logger.info(
            f"Report created: id={report.id}, reporter={caller}, type={report.type}, priority={report.priority}"
        )

        return ReportOut.from_report(report, now)

    finally:
        reports_latency_seconds.observe(time.perf_counter() - t0)


@router.get("/{report_id}", response_model=ReportOut)
async def get_report(
    report_id: int,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(user_auth),
    now: datetime = Depends(get_now),
) -> ReportOut:
    """Read one of the caller's own reports."""
    report = await db.get(Report, report_id)
    if report is None or report.reporter_id != caller:
        raise HTTPException(status_code=404, detail="Report not found")
    return ReportOut.from_report(report, now)
