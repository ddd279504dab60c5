"""
Record validators for bookings and reports.

Validators collect every violated constraint and raise a single `ValidationError`
naming each field, so a rejected write reports everything wrong with it at once.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any
from urllib.parse import urlparse

from core import moderation
from core.config import Settings
from core.enums import (
    ACTIONS_TAKEN,
    BOOKING_STATUSES,
    DEFAULT_PRIORITY,
    REPORT_PRIORITIES,
    REPORT_STATUSES,
    REPORT_TYPES,
)
from core.errors import FieldError, ValidationError

MAX_REF_LENGTH = 64
MAX_REASON_LENGTH = 500
MAX_DESCRIPTION_LENGTH = 1000
MAX_ADMIN_NOTES_LENGTH = 1000
MAX_EVIDENCE_ITEMS = 20

BOOKING_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"confirmed", "cancelled"}),
    "confirmed": frozenset({"cancelled"}),
    "cancelled": frozenset(),
}


@dataclass(frozen=True)
class BookingCandidate:
    """A booking that passed record validation and may be persisted."""

    space: str
    guest: str
    start_time: datetime
    end_time: datetime
    status: str = "pending"

    @property
    def overlap_key(self) -> tuple[str, datetime, datetime]:
        """Composite key used by the overlap query."""
        return (self.space, self.start_time, self.end_time)

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time


@dataclass
class ReportChange:
    """What a moderation update did to a report."""

    escalated: bool = False
    closed_as: str | None = None


# ────────────────────────────────
# Field helpers
# ────────────────────────────────
def _clean(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _check_ref(errors: list[FieldError], field: str, value: Any) -> str | None:
    value = _clean(value)
    if value is None:
        errors.append(FieldError(field, "required", f"{field} is required"))
        return None
    if not isinstance(value, str):
        errors.append(FieldError(field, "type", f"{field} must be a string id"))
        return None
    if len(value) > MAX_REF_LENGTH:
        errors.append(FieldError(field, "max_length", f"{field} cannot exceed {MAX_REF_LENGTH} characters"))
        return None
    return value


def _check_text(
    errors: list[FieldError], field: str, value: Any, max_length: int, required: bool = True
) -> str | None:
    value = _clean(value)
    if value is None:
        if required:
            errors.append(FieldError(field, "required", f"{field} is required"))
        return None
    if not isinstance(value, str):
        errors.append(FieldError(field, "type", f"{field} must be text"))
        return None
    if len(value) > max_length:
        errors.append(FieldError(field, "max_length", f"{field} cannot exceed {max_length} characters"))
        return None
    return value


def _check_enum(errors: list[FieldError], field: str, value: Any, allowed: tuple[str, ...]) -> str | None:
    if value not in allowed:
        errors.append(FieldError(field, "enum", f"{field} must be one of: {', '.join(allowed)}"))
        return None
    return value


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a timestamp into naive UTC.

    Accepts datetime objects and ISO-8601 strings (a trailing "Z" is allowed).

    Raises:
        ValueError: If the value is not a well-formed timestamp
    """
    if isinstance(value, datetime):
        return moderation.as_naive_utc(value)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        return moderation.as_naive_utc(datetime.fromisoformat(text))
    raise ValueError(f"not a timestamp: {value!r}")


def _check_timestamp(errors: list[FieldError], field: str, value: Any) -> datetime | None:
    if _clean(value) is None:
        errors.append(FieldError(field, "required", f"{field} is required"))
        return None
    try:
        return parse_timestamp(value)
    except ValueError:
        errors.append(FieldError(field, "timestamp", f"{field} must be a valid ISO-8601 timestamp"))
        return None


def _check_evidence(errors: list[FieldError], value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        errors.append(FieldError("evidence", "type", "evidence must be a list of URLs"))
        return []
    if len(value) > MAX_EVIDENCE_ITEMS:
        errors.append(FieldError("evidence", "max_items", f"evidence cannot exceed {MAX_EVIDENCE_ITEMS} items"))
        return []
    urls = []
    for index, item in enumerate(value):
        parsed = urlparse(item) if isinstance(item, str) else None
        if parsed is None or parsed.scheme not in ("http", "https") or not parsed.netloc:
            errors.append(FieldError(f"evidence[{index}]", "url", "evidence items must be http(s) URLs"))
            continue
        urls.append(item)
    return urls


# ────────────────────────────────
# Bookings
# ────────────────────────────────
def _check_window(
    errors: list[FieldError], space: Any, start_time: Any, end_time: Any
) -> tuple[str | None, datetime | None, datetime | None]:
    space_id = _check_ref(errors, "space", space)
    start = _check_timestamp(errors, "start_time", start_time)
    end = _check_timestamp(errors, "end_time", end_time)

    if start is not None and end is not None and end <= start:
        errors.append(FieldError("end_time", "after_start", "end_time must be after start_time"))
    return space_id, start, end


def validate_window(space: Any, start_time: Any, end_time: Any) -> tuple[str, datetime, datetime]:
    """
    Validate an overlap query window.

    Raises:
        ValidationError: On a missing space, malformed timestamps or an inverted window
    """
    errors: list[FieldError] = []
    window = _check_window(errors, space, start_time, end_time)
    if errors:
        raise ValidationError(errors)
    return window


def validate_booking(
    space: Any,
    guest: Any,
    start_time: Any,
    end_time: Any,
    status: Any = None,
) -> BookingCandidate:
    """
    Validate a candidate booking record.

    Does not check for double booking; callers run the overlap query on
    `BookingCandidate.overlap_key`.

    Raises:
        ValidationError: On any missing reference, malformed timestamp,
            inverted window or unknown status
    """
    errors: list[FieldError] = []

    space_id, start, end = _check_window(errors, space, start_time, end_time)
    guest_id = _check_ref(errors, "guest", guest)

    status = _clean(status) or "pending"
    _check_enum(errors, "status", status, BOOKING_STATUSES)

    if errors:
        raise ValidationError(errors)

    return BookingCandidate(space=space_id, guest=guest_id, start_time=start, end_time=end, status=status)


def check_booking_window(candidate: BookingCandidate, now: datetime, settings: Settings) -> None:
    """
    Apply marketplace booking policy to a validated candidate.

    Raises:
        ValidationError: If the booking starts in the past, is too short or too
            long, or starts beyond the advance-booking horizon
    """
    errors: list[FieldError] = []
    now = moderation.as_naive_utc(now)
    hours = candidate.duration.total_seconds() / 3600

    if candidate.start_time < now:
        errors.append(FieldError("start_time", "future", "Cannot book spaces in the past"))

    if hours < settings.booking_min_hours:
        errors.append(
            FieldError("end_time", "min_duration", f"Minimum booking duration is {settings.booking_min_hours:g} hour(s)")
        )
    elif hours > settings.booking_max_hours:
        errors.append(
            FieldError("end_time", "max_duration", f"Maximum booking duration is {settings.booking_max_hours:g} hours")
        )

    if candidate.start_time > now + timedelta(days=settings.booking_max_advance_days):
        errors.append(
            FieldError(
                "start_time",
                "max_advance",
                f"Cannot book more than {settings.booking_max_advance_days} days in advance",
            )
        )

    if errors:
        raise ValidationError(errors)


def check_booking_transition(current: str, target: str) -> None:
    if target not in BOOKING_TRANSITIONS.get(current, frozenset()):
        raise ValidationError.single("status", "transition", f"Cannot move booking from {current} to {target}")


# ────────────────────────────────
# Reports
# ────────────────────────────────
def validate_report(
    reporter_id: Any,
    type: Any,
    reason: Any,
    description: Any,
    reported_space_id: Any = None,
    reported_user_id: Any = None,
    evidence: Any = None,
    priority: Any = None,
    status: Any = None,
) -> dict[str, Any]:
    """
    Validate a new report and derive its initial priority.

    Returns:
        Column values ready to construct a `models.Report`

    Raises:
        ValidationError: If the report does not target exactly one of space or
            user, or any field is missing, too long or outside its value set
    """
    errors: list[FieldError] = []

    space_id = _clean(reported_space_id)
    user_id = _clean(reported_user_id)
    if (space_id is None) == (user_id is None):
        errors.append(FieldError("target", "exactly_one", "must target exactly one of space or user"))
    elif space_id is not None:
        space_id = _check_ref(errors, "reported_space_id", space_id)
    else:
        user_id = _check_ref(errors, "reported_user_id", user_id)

    reporter = _check_ref(errors, "reporter_id", reporter_id)
    report_type = _check_enum(errors, "type", type, REPORT_TYPES)
    reason_text = _check_text(errors, "reason", reason, MAX_REASON_LENGTH)
    description_text = _check_text(errors, "description", description, MAX_DESCRIPTION_LENGTH)
    urls = _check_evidence(errors, evidence)

    explicit_priority = None
    if priority is not None:
        explicit_priority = _check_enum(errors, "priority", priority, REPORT_PRIORITIES)

    status = status or "pending"
    _check_enum(errors, "status", status, REPORT_STATUSES)

    if errors:
        raise ValidationError(errors)

    resolved_priority, priority_explicit = moderation.initial_priority(report_type, explicit_priority, DEFAULT_PRIORITY)

    return {
        "reporter_id": reporter,
        "reported_space_id": space_id,
        "reported_user_id": user_id,
        "type": report_type,
        "reason": reason_text,
        "description": description_text,
        "evidence": urls,
        "status": status,
        "priority": resolved_priority,
        "priority_explicit": priority_explicit,
    }


def validate_report_update(report: Any, changes: dict[str, Any], admin: str, now: datetime) -> ReportChange:
    """
    Validate and apply a moderation update to a report.

    Recognised keys: status, type, priority, admin_notes, action_taken. Nothing is
    applied unless every change is valid.

    Raises:
        ValidationError: On unknown values, disallowed status transitions or
            remediation outcomes recorded outside the resolution path
    """
    errors: list[FieldError] = []

    target_status = changes.get("status")
    if target_status is not None:
        if _check_enum(errors, "status", target_status, REPORT_STATUSES) is not None:
            if target_status != report.status and not moderation.can_transition(report.status, target_status):
                errors.append(
                    FieldError("status", "transition", f"Cannot move report from {report.status} to {target_status}")
                )
    new_status = target_status or report.status

    new_type = changes.get("type")
    if new_type is not None:
        _check_enum(errors, "type", new_type, REPORT_TYPES)

    new_priority = changes.get("priority")
    if new_priority is not None:
        _check_enum(errors, "priority", new_priority, REPORT_PRIORITIES)

    notes = None
    if "admin_notes" in changes:
        notes = _check_text(errors, "admin_notes", changes["admin_notes"], MAX_ADMIN_NOTES_LENGTH, required=False)

    action = changes.get("action_taken")
    if action is not None:
        if _check_enum(errors, "action_taken", action, ACTIONS_TAKEN) is not None:
            if not moderation.is_closed(new_status):
                errors.append(
                    FieldError(
                        "action_taken",
                        "resolution_only",
                        "action_taken can only be recorded when resolving or dismissing a report",
                    )
                )
            elif report.action_taken is not None and report.action_taken != action:
                errors.append(FieldError("action_taken", "resolution_only", "action_taken was already recorded"))

    if errors:
        raise ValidationError(errors)

    change = ReportChange()
    if new_type is not None or new_priority is not None:
        change.escalated = moderation.apply_type_change(report, new_type or report.type, new_priority)

    if "admin_notes" in changes:
        report.admin_notes = notes

    if target_status is not None and target_status != report.status:
        report.status = target_status
        if moderation.is_closed(target_status) and report.resolved_at is None:
            report.resolved_at = moderation.as_naive_utc(now)
            report.resolved_by = admin
            change.closed_as = target_status

    if action is not None:
        report.action_taken = action

    return change
