"""Closed value sets shared by models, validators and migrations."""

# Bookings
BOOKING_STATUSES = ("pending", "confirmed", "cancelled")
ACTIVE_BOOKING_STATUSES = ("pending", "confirmed")

# Reports
REPORT_TYPES = (
    "scam",
    "fake_listing",
    "inappropriate_content",
    "spam",
    "safety_concern",
    "fraudulent_activity",
    "harassment",
    "price_gouging",  # overpricing complaints
    "facility_misrepresentation",  # space doesn't match photos
    "other",
)

REPORT_STATUSES = ("pending", "under_review", "resolved", "dismissed")
OPEN_REPORT_STATUSES = ("pending", "under_review")
CLOSED_REPORT_STATUSES = ("resolved", "dismissed")

# Ordered from least to most severe
REPORT_PRIORITIES = ("low", "medium", "high", "critical")
DEFAULT_PRIORITY = "medium"

ACTIONS_TAKEN = (
    "space_removed",
    "user_warned",
    "user_suspended",
    "user_banned",
    "content_edited",
    "no_action",
    "pending_verification",
)


def sql_in(values: tuple[str, ...]) -> str:
    """Render a value set for use inside a CHECK constraint."""
    return ", ".join(f"'{v}'" for v in values)
