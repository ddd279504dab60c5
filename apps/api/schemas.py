"""Response models shared by the report, admin and booking routers."""

from datetime import datetime

from pydantic import BaseModel

from core.moderation import days_open, is_urgent
from models import Booking, Report


class ReportOut(BaseModel):
    """Report as returned by the API, with derived moderation fields."""

    id: int
    reporter_id: str
    reported_space_id: str | None
    reported_user_id: str | None
    type: str
    reason: str
    description: str
    evidence: list[str]
    status: str
    priority: str
    priority_explicit: bool
    admin_notes: str | None
    action_taken: str | None
    resolved_by: str | None
    resolved_at: datetime | None
    created_at: datetime
    updated_at: datetime
    # Derived on every read, never stored
    days_open: int
    is_urgent: bool

    @classmethod
    def from_report(cls, report: Report, now: datetime) -> "ReportOut":
        return cls(
            id=report.id,
            reporter_id=report.reporter_id,
            reported_space_id=report.reported_space_id,
            reported_user_id=report.reported_user_id,
            type=report.type,
            reason=report.reason,
            description=report.description,
            evidence=list(report.evidence or []),
            status=report.status,
            priority=report.priority,
            priority_explicit=report.priority_explicit,
            admin_notes=report.admin_notes,
            action_taken=report.action_taken,
            resolved_by=report.resolved_by,
            resolved_at=report.resolved_at,
            created_at=report.created_at,
            updated_at=report.updated_at,
            days_open=days_open(report, now),
            is_urgent=is_urgent(report, now),
        )


class BookingOut(BaseModel):
    """Booking as returned by the API."""

    id: int
    space: str
    guest: str
    start_time: datetime
    end_time: datetime
    status: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_booking(cls, booking: Booking) -> "BookingOut":
        return cls(
            id=booking.id,
            space=booking.space,
            guest=booking.guest,
            start_time=booking.start_time,
            end_time=booking.end_time,
            status=booking.status,
            is_active=booking.is_active,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )


class ConflictOut(BaseModel):
    """Booking occupying part of a requested window."""

    id: int
    start_time: datetime
    end_time: datetime
    status: str
