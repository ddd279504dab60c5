"""Conversion of legacy flat report documents into the canonical report shape."""

from typing import Any

from core.validation import parse_timestamp, validate_report

LEGACY_STATUS_MAP = {
    "open": "pending",
    "reviewed": "under_review",
    "resolved": "resolved",
}

LEGACY_RESOLVER = "legacy-import"


def _object_id(value: Any) -> Any:
    # mongoexport writes ObjectIds as {"$oid": "..."}
    if isinstance(value, dict) and "$oid" in value:
        return value["$oid"]
    return value


def _date(value: Any) -> Any:
    # and dates as {"$date": "..."}
    if isinstance(value, dict) and "$date" in value:
        value = value["$date"]
    return parse_timestamp(value) if value is not None else None


def legacy_report_fields(doc: dict[str, Any]) -> dict[str, Any]:
    """
    Map one legacy report document to validated canonical column values.

    Legacy documents carry `space`, `reportedBy`, `reason`, `status`
    (open|reviewed|resolved) and timestamps. They always target a space and have no
    type, so they import as type `other` with the reason doubling as description.

    Raises:
        ValidationError: If the document cannot form a valid report
        KeyError: If the legacy status is unknown
    """
    status = LEGACY_STATUS_MAP[doc.get("status") or "open"]
    reason = doc.get("reason")

    fields = validate_report(
        reporter_id=_object_id(doc.get("reportedBy")),
        reported_space_id=_object_id(doc.get("space")),
        type="other",
        reason=reason,
        description=reason,
        status=status,
    )

    created_at = _date(doc.get("createdAt"))
    updated_at = _date(doc.get("updatedAt"))
    if created_at is not None:
        fields["created_at"] = created_at
    if updated_at is not None:
        fields["updated_at"] = updated_at

    if status == "resolved":
        fields["resolved_at"] = updated_at or created_at
        fields["resolved_by"] = LEGACY_RESOLVER

    return fields
