"""Guest list CSV export"""

import csv
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from .formatting import answer_text
from .models import Event, Guest

logger = logging.getLogger(__name__)

FIXED_COLUMNS = [
    "Event Name",
    "Event ID",
    "Event Start",
    "Calendar",
    "Guest ID",
    "Name",
    "Email",
    "First Name",
    "Last Name",
    "Phone",
    "Approval Status",
    "Registered At",
    "Checked In At",
    "Ticket",
]


@dataclass
class EventGuests:
    """Guests collected for one event"""

    event: Event
    guests: list[Guest] = field(default_factory=list)


@dataclass
class GuestExport:
    """Header and rows ready to be written"""

    columns: list[str]
    rows: list[list[str]]
    event_count: int

    @property
    def question_columns(self) -> list[str]:
        return self.columns[len(FIXED_COLUMNS) :]


def question_labels(collected: list[EventGuests]) -> list[str]:
    """Sorted distinct registration question labels across every guest"""
    labels = {answer.label for item in collected for guest in item.guests for answer in guest.registration_answers if answer.label}
    return sorted(labels)


def _fixed_values(event: Event, guest: Guest, calendar: str) -> list[str]:
    ticket = guest.ticket
    checked_in = guest.checked_in_at or (ticket.checked_in_at if ticket else None)
    return [
        event.name,
        event.api_id,
        event.start_at or "",
        calendar,
        guest.api_id,
        guest.display_name or "",
        guest.display_email or "",
        guest.user_first_name or "",
        guest.user_last_name or "",
        guest.phone_number or "",
        guest.display_status,
        guest.registered_at or "",
        checked_in or "",
        ticket.name if ticket and ticket.name else "",
    ]


def build_guest_export(collected: list[EventGuests], calendar: str) -> GuestExport:
    """One row per guest: fixed columns then one column per question label"""
    labels = question_labels(collected)
    rows = []
    for item in collected:
        for guest in item.guests:
            answers = {answer.label: answer_text(answer.answer) for answer in guest.registration_answers if answer.label}
            rows.append(_fixed_values(item.event, guest, calendar) + [answers.get(label, "") for label in labels])
    return GuestExport(columns=FIXED_COLUMNS + labels, rows=rows, event_count=len(collected))


def default_export_filename(calendar: str, today: date | None = None) -> str:
    slug = re.sub(r"[^A-Za-z0-9_-]+", "-", calendar).strip("-").lower() or "calendar"
    return f"luma-guests-{slug}-{(today or date.today()).isoformat()}.csv"


def resolve_export_path(export_dir: Path, calendar: str, filename: str | None = None) -> Path:
    """Place the file inside export_dir; caller supplied names lose any directory part"""
    name = Path(filename).name if filename else default_export_filename(calendar)
    if not name.lower().endswith(".csv"):
        name += ".csv"
    return Path(export_dir) / name


def write_guest_export(export: GuestExport, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(export.columns)
        writer.writerows(export.rows)
    logger.info(f"Wrote {len(export.rows)} guest rows for {export.event_count} event(s) to {path}")
    return path.resolve()
