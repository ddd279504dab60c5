"""
Tests for apps.api.bookings_repo against the database:
- Concurrent requests for one window store exactly one booking
- Guest listing order and filters
"""

import asyncio
from datetime import datetime

from sqlalchemy import func, select

from apps.api.bookings_repo import create_booking, list_guest_bookings, transition_booking
from core.db import AsyncSessionLocal
from core.errors import BookingConflictError
from core.validation import validate_booking
from models import Booking

START = datetime(2026, 3, 5, 10, 0)
END = datetime(2026, 3, 5, 12, 0)


async def _book(guest, space="space-x", start=START, end=END):
    async with AsyncSessionLocal() as db:
        return await create_booking(db, validate_booking(space, guest, start, end))


async def _book_concurrently(count):
    return await asyncio.gather(*(_book(f"guest-{i}") for i in range(count)), return_exceptions=True)


async def _count(space):
    async with AsyncSessionLocal() as db:
        return await db.scalar(select(func.count()).select_from(Booking).where(Booking.space == space))


def test_concurrent_requests_store_one_booking():
    results = asyncio.run(_book_concurrently(5))

    stored = [r for r in results if isinstance(r, Booking)]
    conflicts = [r for r in results if isinstance(r, BookingConflictError)]
    assert len(stored) == 1
    assert len(conflicts) == 4
    assert all(c.conflicts[0]["id"] == stored[0].id for c in conflicts)
    assert asyncio.run(_count("space-x")) == 1


def test_concurrent_requests_for_different_spaces():
    async def book_each():
        return await asyncio.gather(*(_book("guest-1", space=f"space-{i}") for i in range(3)))

    results = asyncio.run(book_each())
    assert sorted(b.space for b in results) == ["space-0", "space-1", "space-2"]


async def _listing(guest, **filters):
    async with AsyncSessionLocal() as db:
        return await list_guest_bookings(db, guest, **filters)


async def _cancel(booking_id):
    async with AsyncSessionLocal() as db:
        booking = await db.get(Booking, booking_id)
        return await transition_booking(db, booking, "cancelled")


def test_guest_listing_is_newest_first():
    first = asyncio.run(_book("guest-1", space="space-1"))
    second = asyncio.run(_book("guest-1", space="space-2"))
    asyncio.run(_book("guest-2", space="space-3"))
    asyncio.run(_cancel(first.id))

    assert [b.id for b in asyncio.run(_listing("guest-1"))] == [second.id, first.id]
    assert [b.id for b in asyncio.run(_listing("guest-1", status="cancelled"))] == [first.id]
    assert [b.id for b in asyncio.run(_listing("guest-1", limit=1, offset=1))] == [first.id]
