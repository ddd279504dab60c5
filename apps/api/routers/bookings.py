"""Booking endpoints for guests."""

import logging
import time
from datetime import datetime

import redis.asyncio as redis
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from apps.api.bookings_repo import (
    conflict_summary,
    create_booking,
    find_overlapping,
    list_guest_bookings,
    transition_booking,
)
from apps.api.deps import get_db, get_now, get_redis_client
from apps.api.schemas import BookingOut, ConflictOut
from core.auth import user_auth
from core.config import settings
from core.enums import BOOKING_STATUSES
from core.errors import BookingConflictError, ValidationError
from core.metrics import (
    booking_conflicts_total,
    bookings_latency_seconds,
    bookings_rejected_total,
    bookings_total,
)
from core.redis import within_rate_limit
from core.validation import check_booking_window, validate_booking, validate_window
from models import Booking

router = APIRouter(prefix="/bookings", tags=["bookings"])
logger = logging.getLogger(__name__)


class BookingIn(BaseModel):
    """Input model for requesting a booking. Times are ISO-8601."""

    space: str | None = None
    start_time: str | None = None
    end_time: str | None = None


@router.post("", status_code=status.HTTP_201_CREATED, response_model=BookingOut)
async def request_booking(
    body: BookingIn,
    db: AsyncSession = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis_client),
    caller: str = Depends(user_auth),
    now: datetime = Depends(get_now),
) -> BookingOut:
    """
    Request a booking of a space for the calling guest.

    Validates:
    - Space, start and end present, end after start
    - Not in the past, duration within limits, within the advance-booking horizon
    - Rate limit: `booking_rate_limit_count` requests per guest per window
    - No pending or confirmed booking of the same space overlaps

    Args:
        body: Booking details
        db: Database session
        redis_client: Redis client for the rate limit
        caller: Guest user id (from user_auth)
        now: Request time

    Returns:
        The stored pending booking

    Raises:
        ValidationError: On invalid fields or policy violations
        BookingConflictError: If the window is already taken
        HTTPException: 429 when the guest is rate limited
    """
    t0 = time.perf_counter()
    try:
        candidate = validate_booking(space=body.space, guest=caller, start_time=body.start_time, end_time=body.end_time)
        check_booking_window(candidate, now, settings)

        allowed = await within_rate_limit(
            redis_client,
            f"rl:booking:{caller}",
            settings.booking_rate_limit_count,
            settings.booking_rate_limit_window_seconds,
        )
        if not allowed:
            bookings_rejected_total.labels(reason="rate_limited").inc()
            raise HTTPException(429, "Too many booking attempts. Please try again later.")

        try:
            booking = await create_booking(db, candidate)
        except BookingConflictError as e:
            booking_conflicts_total.inc()
            logger.warning(f"Booking conflict: space={candidate.space}, guest={caller}, conflicts={len(e.conflicts)}")
            raise

        bookings_total.labels(status=booking.status).inc()
        logger.info(
            f"Booking created: id={booking.id}, space={booking.space}, guest={caller}, "
            f"window={booking.start_time.isoformat()}..{booking.end_time.isoformat()}"
        )
        return BookingOut.from_booking(booking)

    finally:
        bookings_latency_seconds.observe(time.perf_counter() - t0)


@router.get("", response_model=list[BookingOut])
async def my_bookings(
    status: str | None = Query(None),
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(user_auth),
) -> list[BookingOut]:
    """The caller's bookings, newest first, optionally filtered by status."""
    if status is not None and status not in BOOKING_STATUSES:
        raise ValidationError.single("status", "enum", f"status must be one of: {', '.join(BOOKING_STATUSES)}")

    bookings = await list_guest_bookings(db, caller, status=status, limit=limit, offset=offset)
    return [BookingOut.from_booking(b) for b in bookings]


@router.get("/conflicts", response_model=list[ConflictOut])
async def list_conflicts(
    space: str = Query(...),
    start_time: str = Query(...),
    end_time: str = Query(...),
    db: AsyncSession = Depends(get_db),
) -> list[dict]:
    """Active bookings of a space overlapping the given window."""
    space_id, start, end = validate_window(space, start_time, end_time)
    return conflict_summary(await find_overlapping(db, space_id, start, end))


@router.get("/{booking_id}", response_model=BookingOut)
async def get_booking(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(user_auth),
) -> BookingOut:
    """Read one of the caller's bookings."""
    booking = await _own_booking(db, booking_id, caller)
    return BookingOut.from_booking(booking)


@router.post("/{booking_id}/cancel", response_model=BookingOut)
async def cancel_booking(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(user_auth),
) -> BookingOut:
    """Cancel one of the caller's pending or confirmed bookings."""
    booking = await _own_booking(db, booking_id, caller)
    booking = await transition_booking(db, booking, "cancelled")
    bookings_total.labels(status="cancelled").inc()
    return BookingOut.from_booking(booking)


async def _own_booking(db: AsyncSession, booking_id: int, guest: str) -> Booking:
    booking = await db.get(Booking, booking_id)
    if booking is None or booking.guest != guest:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking
