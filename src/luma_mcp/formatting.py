"""Presentation helpers shared by the tool handlers"""

import re
from datetime import datetime, timezone
from typing import Any

from .models import Event, EventTicket, GeoAddress, Guest

NOT_AVAILABLE = "Not available"
NOT_SPECIFIED = "Not specified"

ISO_DURATION_RE = re.compile(r"^P(?:(\d+)Y)?(?:(\d+)M)?(?:(\d+)W)?(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?)?$")
DURATION_UNITS = ("year", "month", "week", "day", "hour", "minute")


def parse_datetime(value: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC"""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_datetime(value: str | None, default: str = NOT_AVAILABLE) -> str:
    if not value:
        return default
    parsed = parse_datetime(value)
    if parsed is None:
        return value
    return parsed.strftime("%a %b %d, %Y %H:%M %Z").strip()


def truncate(text: str, limit: int) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


def plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count != 1 else ''}"


def classify_event_type(event: Event) -> str:
    """Derive in_person / online / hybrid / unknown from meeting URL and address"""
    has_meeting = bool(event.meeting_url or event.zoom_meeting_url)
    has_address = event.geo_address_json is not None
    if has_meeting:
        return "hybrid" if has_address else "online"
    return "in_person" if has_address else "unknown"


def describe_duration(event: Event) -> str:
    """Human readable length of an event"""
    if event.duration_interval:
        match = ISO_DURATION_RE.match(event.duration_interval.strip())
        if match:
            parts = []
            for unit, raw in zip(DURATION_UNITS, match.groups()[:6]):
                if raw and int(raw) > 0:
                    parts.append(plural(int(raw), unit))
            return ", ".join(parts) or "Unknown duration"

    start = parse_datetime(event.start_at)
    end = parse_datetime(event.end_at)
    if start and end:
        hours = round((end - start).total_seconds() / 3600)
        return plural(hours, "hour")
    return NOT_SPECIFIED


def describe_address(address: GeoAddress | None) -> str:
    """Short location: full address, street address, then city"""
    if address is None:
        return NOT_SPECIFIED
    return address.full_address or address.address or address.city or NOT_SPECIFIED


def short_location(event: Event) -> str:
    address = event.geo_address_json
    if address is None:
        return NOT_SPECIFIED
    return address.city or address.address or NOT_SPECIFIED


def location_lines(event: Event) -> str:
    address = event.geo_address_json
    if address is None:
        return "- No location information available"
    return f"""- Address: {address.full_address or address.address or NOT_SPECIFIED}
- City: {address.city or NOT_SPECIFIED}
- Country: {address.country or NOT_SPECIFIED}"""


def answer_text(answer: Any) -> str:
    """Render a registration answer, which may be a string, bool, number or list"""
    if answer is None:
        return ""
    if isinstance(answer, bool):
        return "Yes" if answer else "No"
    if isinstance(answer, list):
        return ", ".join(answer_text(item) for item in answer)
    return str(answer)


def format_answers(guest: Guest) -> str:
    if not guest.registration_answers:
        return "None"
    return "\n  ".join(f"{item.label}: {answer_text(item.answer)}" for item in guest.registration_answers)


def format_amount(ticket: EventTicket | None) -> str:
    if ticket is None:
        return "N/A"
    amount = ticket.amount
    if amount is not None and float(amount).is_integer():
        amount = int(amount)
    return f"{(ticket.currency or '').upper()} {amount if amount is not None else ''}".strip() or "N/A"


# ============================================================================
# UPDATE DIFF
# ============================================================================


def _same_instant(current: str | None, requested: str | None) -> bool:
    current_dt, requested_dt = parse_datetime(current), parse_datetime(requested)
    if current_dt and requested_dt:
        return current_dt == requested_dt
    return (current or "") == (requested or "")


def _quoted_excerpt(text: str | None) -> str:
    return f'"{truncate(text, 50)}"' if text else "(empty)"


def describe_event_changes(current: Event, updates: dict[str, Any]) -> list[str]:
    """
    Compare requested values against the current event.

    Returns one "- Field: old → new" line per field that would change; an empty
    list means the update is a no-op.
    """
    changes = []

    if "name" in updates and updates["name"] != current.name:
        changes.append(f'- Name: "{current.name}" → "{updates["name"]}"')

    if "description" in updates and updates["description"] != (current.description or ""):
        changes.append(f"- Description: {_quoted_excerpt(current.description)} → {_quoted_excerpt(updates['description'])}")

    if "start_at" in updates and not _same_instant(current.start_at, updates["start_at"]):
        changes.append(f"- Start: {format_datetime(current.start_at, 'Not set')} → {format_datetime(updates['start_at'], 'Not set')}")

    if "end_at" in updates and not _same_instant(current.end_at, updates["end_at"]):
        changes.append(f"- End: {format_datetime(current.end_at, 'Not set')} → {format_datetime(updates['end_at'], 'Not set')}")

    if "timezone" in updates and updates["timezone"] != current.timezone:
        changes.append(f"- Timezone: {current.timezone or 'Not set'} → {updates['timezone']}")

    if "visibility" in updates and updates["visibility"] != (current.visibility or "public"):
        changes.append(f"- Visibility: {current.visibility or 'public'} → {updates['visibility']}")

    if "event_type" in updates:
        current_type = classify_event_type(current)
        if updates["event_type"] != current_type:
            changes.append(f"- Type: {current_type} → {updates['event_type']}")

    for field, label in (("meeting_url", "Meeting URL"), ("zoom_meeting_url", "Zoom URL"), ("cover_url", "Cover Image")):
        if field in updates and updates[field] != (getattr(current, field) or ""):
            changes.append(f"- {label}: {getattr(current, field) or 'Not set'} → {updates[field] or 'Not set'}")

    for field, label in (("geo_latitude", "Latitude"), ("geo_longitude", "Longitude")):
        current_value = getattr(current, field)
        if field in updates and str(updates[field]) != ("" if current_value is None else str(current_value)):
            changes.append(f"- {label}: {current_value if current_value is not None else 'Not set'} → {updates[field]}")

    if "geo_address_json" in updates:
        current_address = current.geo_address_json.model_dump(exclude_none=True) if current.geo_address_json else {}
        if updates["geo_address_json"] != current_address:
            requested = GeoAddress.model_validate(updates["geo_address_json"])
            changes.append(f"- Location: {describe_address(current.geo_address_json)} → {describe_address(requested)}")

    return changes
