from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from core.db import Base, BigIntPK
from core.enums import ACTIVE_BOOKING_STATUSES, BOOKING_STATUSES, sql_in


class Booking(Base):
    """Reservation of a space for a time window by a guest."""

    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    space: Mapped[str] = mapped_column(String(64), nullable=False)
    guest: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")  # pending|confirmed|cancelled
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint(f"status IN ({sql_in(BOOKING_STATUSES)})", name="chk_booking_status"),
        CheckConstraint("end_time > start_time", name="chk_booking_window"),
        # Overlap lookups; not unique, overlap is guarded by the write path
        Index("idx_bookings_space_window", "space", "start_time", "end_time"),
        Index("idx_bookings_space_status", "space", "status"),
    )

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_BOOKING_STATUSES

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, space={self.space}, guest={self.guest}, status={self.status})>"
