"""Admin moderation endpoints (HTTP Basic protected)."""

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from apps.api.bookings_repo import transition_booking
from apps.api.deps import get_db, get_now
from apps.api.schemas import BookingOut, ReportOut
from core.auth import admin_basic_auth
from core.enums import OPEN_REPORT_STATUSES
from core.metrics import bookings_total, reports_closed_total, reports_escalated_total
from core.moderation import triage_key
from core.validation import validate_report_update
from models import Booking, Report

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)


class ReportUpdateIn(BaseModel):
    """Moderation update. Omitted fields are left unchanged; admin_notes may be cleared with null."""

    status: str | None = None  # pending|under_review|resolved|dismissed
    type: str | None = None
    priority: str | None = None
    admin_notes: str | None = None
    action_taken: str | None = None


@router.get("/test")
async def admin_mounted() -> dict[str, Any]:
    """Route-mounting check."""
    return {"success": True, "message": "Admin routes are mounted and accessible!"}


@router.get("")
async def admin_dashboard() -> JSONResponse:
    """Admin dashboard summary is not available yet."""
    return JSONResponse(
        status_code=status.HTTP_501_NOT_IMPLEMENTED,
        content={"success": False, "message": "Admin routes not implemented yet"},
    )


@router.get("/reports/queue", response_model=list[ReportOut])
async def moderation_queue(
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    admin: str = Depends(admin_basic_auth),
    now: datetime = Depends(get_now),
) -> list[ReportOut]:
    """
    Open reports in triage order: urgent first, then by priority, then oldest first.

    Urgency depends on the request time, so ordering happens after loading.
    """
    result = await db.execute(select(Report).where(Report.status.in_(OPEN_REPORT_STATUSES)))
    reports = sorted(result.scalars().all(), key=lambda r: triage_key(r, now))
    return [ReportOut.from_report(r, now) for r in reports[:limit]]


@router.get("/reports/{report_id}", response_model=ReportOut)
async def get_report(
    report_id: int,
    db: AsyncSession = Depends(get_db),
    admin: str = Depends(admin_basic_auth),
    now: datetime = Depends(get_now),
) -> ReportOut:
    """Read any report."""
    report = await db.get(Report, report_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return ReportOut.from_report(report, now)


@router.patch("/reports/{report_id}", response_model=ReportOut)
async def update_report(
    report_id: int,
    body: ReportUpdateIn,
    db: AsyncSession = Depends(get_db),
    admin: str = Depends(admin_basic_auth),
    now: datetime = Depends(get_now),
) -> ReportOut:
    """
    Apply a moderation update.

    Reclassifying the type re-runs priority escalation unless a priority was
    chosen explicitly. Resolving or dismissing stamps resolved_at/resolved_by once.

    Raises:
        ValidationError: On invalid values or a disallowed status transition
        HTTPException: 404 if the report does not exist
    """
    report = await db.get(Report, report_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")

    change = validate_report_update(report, body.model_dump(exclude_unset=True), admin, now)
    report.updated_at = now
    await db.commit()
    await db.refresh(report)

    if change.escalated:
        reports_escalated_total.labels(priority=report.priority).inc()
    if change.closed_as:
        reports_closed_total.labels(status=change.closed_as).inc()

    logger.info(f"Report {report.id} updated by {admin}: status={report.status}, priority={report.priority}")
    return ReportOut.from_report(report, now)


@router.post("/bookings/{booking_id}/confirm", response_model=BookingOut)
async def confirm_booking(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
    admin: str = Depends(admin_basic_auth),
) -> BookingOut:
    """
    Confirm a pending booking on behalf of the host.

    Raises:
        BookingConflictError: If another confirmed booking overlaps
    """
    booking = await db.get(Booking, booking_id)
    if booking is None:
        raise HTTPException(status_code=404, detail="Booking not found")

    booking = await transition_booking(db, booking, "confirmed")
    bookings_total.labels(status="confirmed").inc()
    return BookingOut.from_booking(booking)
