"""Moderation report model."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from core.db import Base, BigIntPK
from core.enums import ACTIONS_TAKEN, REPORT_PRIORITIES, REPORT_STATUSES, REPORT_TYPES, sql_in


class Report(Base):
    """Complaint filed by a user against exactly one space or one user."""

    __tablename__ = "reports"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    reporter_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    reported_space_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    reported_user_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    reason: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    evidence: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)  # screenshot/photo URLs
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    priority: Mapped[str] = mapped_column(String(16), nullable=False, default="medium")
    # Set when a caller chose the priority; escalation never overrides it
    priority_explicit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    action_taken: Mapped[str | None] = mapped_column(String(32), nullable=True)
    resolved_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "(reported_space_id IS NULL) <> (reported_user_id IS NULL)",
            name="chk_report_single_target",
        ),
        CheckConstraint(f"type IN ({sql_in(REPORT_TYPES)})", name="chk_report_type"),
        CheckConstraint(f"status IN ({sql_in(REPORT_STATUSES)})", name="chk_report_status"),
        CheckConstraint(f"priority IN ({sql_in(REPORT_PRIORITIES)})", name="chk_report_priority"),
        CheckConstraint(
            f"action_taken IS NULL OR action_taken IN ({sql_in(ACTIONS_TAKEN)})",
            name="chk_report_action_taken",
        ),
        # Admin triage queue
        Index("idx_reports_status_priority", "status", "priority"),
        Index("idx_reports_type_created", "type", "created_at"),
        Index("idx_reports_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Report(id={self.id}, type={self.type}, status={self.status}, priority={self.priority})>"
