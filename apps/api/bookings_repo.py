"""Booking persistence with overlap detection and a guarded check-and-insert."""

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from core.enums import ACTIVE_BOOKING_STATUSES
from core.errors import BookingConflictError
from core.validation import BookingCandidate, check_booking_transition
from models import Booking

logger = logging.getLogger(__name__)


async def lock_space(db: AsyncSession, space: str) -> None:
    """
    Serialise booking writes for one space until the current transaction ends.

    PostgreSQL takes a transaction-scoped advisory lock keyed on the space id.
    SQLite transactions already start with BEGIN IMMEDIATE (see core.db), which
    holds the database write lock from the first statement.
    """
    if db.get_bind().dialect.name == "postgresql":
        await db.execute(text("SELECT pg_advisory_xact_lock(hashtext(:space))"), {"space": space})


async def find_overlapping(
    db: AsyncSession,
    space: str,
    start: datetime,
    end: datetime,
    statuses: Sequence[str] = ACTIVE_BOOKING_STATUSES,
    exclude_id: int | None = None,
) -> list[Booking]:
    """
    Bookings of `space` whose window intersects [start, end).

    Windows are half-open, so a booking ending exactly when another starts does
    not overlap it.
    """
    query = (
        select(Booking)
        .where(
            Booking.space == space,
            Booking.status.in_(list(statuses)),
            Booking.start_time < end,
            Booking.end_time > start,
        )
        .order_by(Booking.start_time)
    )
    if exclude_id is not None:
        query = query.where(Booking.id != exclude_id)

    result = await db.execute(query)
    return list(result.scalars().all())


async def list_guest_bookings(
    db: AsyncSession, guest: str, status: str | None = None, limit: int = 10, offset: int = 0
) -> list[Booking]:
    """A guest's bookings, most recently requested first."""
    query = select(Booking).where(Booking.guest == guest)
    if status is not None:
        query = query.where(Booking.status == status)
    query = query.order_by(Booking.created_at.desc(), Booking.id.desc()).limit(limit).offset(offset)

    result = await db.execute(query)
    return list(result.scalars().all())


def conflict_summary(bookings: Sequence[Booking]) -> list[dict[str, Any]]:
    return [
        {
            "id": b.id,
            "start_time": b.start_time.isoformat(),
            "end_time": b.end_time.isoformat(),
            "status": b.status,
        }
        for b in bookings
    ]


async def create_booking(db: AsyncSession, candidate: BookingCandidate) -> Booking:
    """
    Insert a booking unless it overlaps an active booking of the same space.

    Raises:
        BookingConflictError: If any pending or confirmed booking overlaps
    """
    space, start, end = candidate.overlap_key
    try:
        await lock_space(db, space)
        conflicts = await find_overlapping(db, space, start, end)
        if conflicts:
            raise BookingConflictError(space, conflict_summary(conflicts))

        booking = Booking(
            space=space,
            guest=candidate.guest,
            start_time=start,
            end_time=end,
            status=candidate.status,
        )
        db.add(booking)
        await db.commit()
    except BaseException:
        await db.rollback()
        raise

    await db.refresh(booking)
    return booking


async def transition_booking(db: AsyncSession, booking: Booking, target: str) -> Booking:
    """
    Move a booking to `target`, re-checking overlaps when confirming.

    Raises:
        ValidationError: If the status move is not allowed
        BookingConflictError: If confirming would overlap another confirmed booking
    """
    check_booking_transition(booking.status, target)
    previous = booking.status
    try:
        if target == "confirmed":
            await lock_space(db, booking.space)
            conflicts = await find_overlapping(
                db, booking.space, booking.start_time, booking.end_time, statuses=("confirmed",), exclude_id=booking.id
            )
            if conflicts:
                raise BookingConflictError(booking.space, conflict_summary(conflicts))

        booking.status = target
        await db.commit()
    except BaseException:
        await db.rollback()
        raise

    await db.refresh(booking)
    logger.info(f"Booking {booking.id} moved {previous} -> {target}")
    return booking
