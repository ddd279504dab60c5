"""Database models."""

from models.booking import Booking
from models.report import Report

__all__ = [
    "Booking",
    "Report",
]
