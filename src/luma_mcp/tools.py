"""
Tool catalogue and dispatcher.

Each tool validates its arguments with a pydantic model from validation.py,
calls the Luma client for the active calendar, and renders a plain text reply.
Every failure leaves ``ToolDispatcher.call`` as a ``LumaError``.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone

from mcp.types import Tool
from pydantic import BaseModel, ValidationError

from .errors import LumaError, invalid_params_error, method_not_found_error, wrap_tool_error
from .export import EventGuests, build_guest_export, resolve_export_path, write_guest_export
from .formatting import (
    classify_event_type,
    describe_duration,
    describe_event_changes,
    format_amount,
    format_answers,
    format_datetime,
    location_lines,
    parse_datetime,
    short_location,
    truncate,
)
from .models import CredentialProfile, Event
from .profiles import mask_api_key
from .session import LumaSession
from .validation import (
    ConfigureProfileInput,
    EmptyInput,
    EventIdInput,
    EventSummaryInput,
    ExportGuestListInput,
    GetEventGuestInput,
    GetEventGuestsInput,
    ListEventsInput,
    ProfileNameInput,
    RemoveProfileInput,
    UpdateEventInput,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_model: type[BaseModel]

    def to_tool(self) -> Tool:
        return Tool(name=self.name, description=self.description, inputSchema=self.input_model.model_json_schema())


TOOL_SPECS = [
    ToolSpec("configure_profile", "Add or update a Luma calendar API key. The first calendar added becomes the default.", ConfigureProfileInput),
    ToolSpec("list_profiles", "List configured Luma calendars and show which one is active", EmptyInput),
    ToolSpec("switch_profile", "Make another configured calendar the active one for this session", ProfileNameInput),
    ToolSpec("remove_profile", "Remove a configured calendar (requires confirm: true)", RemoveProfileInput),
    ToolSpec("list_events", "Browse Events - List your Luma events with optional date filtering and pagination", ListEventsInput),
    ToolSpec("get_all_events", "All Events Overview - Every event on the calendar grouped by visibility and type", EmptyInput),
    ToolSpec("get_event", "Event Details - Get comprehensive information about a specific event", EventIdInput),
    ToolSpec("get_event_guest", "Individual Guest - Get detailed information about a specific guest", GetEventGuestInput),
    ToolSpec("get_event_guests", "Guest List - Get a paginated list of guests for an event", GetEventGuestsInput),
    ToolSpec("get_all_event_guests", "Complete Guest Analytics - Get all guests for an event with status breakdown", EventIdInput),
    ToolSpec("get_event_summary", "Event Report - Event details combined with guest analytics", EventSummaryInput),
    ToolSpec("update_event", "Update Event - Update event details (shows the proposed changes first; pass require_approval: false to apply)", UpdateEventInput),
    ToolSpec("export_guest_list", "Export guest lists with registration answers to a CSV file", ExportGuestListInput),
]

TOOLS_BY_NAME = {spec.name: spec for spec in TOOL_SPECS}


def list_tools() -> list[Tool]:
    return [spec.to_tool() for spec in TOOL_SPECS]


class ToolDispatcher:
    """Maps tool names to handlers bound to one LumaSession"""

    def __init__(self, session: LumaSession):
        self.session = session
        self._handlers = {
            "configure_profile": self.configure_profile,
            "list_profiles": self.list_profiles,
            "switch_profile": self.switch_profile,
            "remove_profile": self.remove_profile,
            "list_events": self.list_events,
            "get_all_events": self.get_all_events,
            "get_event": self.get_event,
            "get_event_guest": self.get_event_guest,
            "get_event_guests": self.get_event_guests,
            "get_all_event_guests": self.get_all_event_guests,
            "get_event_summary": self.get_event_summary,
            "update_event": self.update_event,
            "export_guest_list": self.export_guest_list,
        }

    async def call(self, name: str, arguments: dict | None = None) -> str:
        """Run one tool and return its text reply"""
        spec = TOOLS_BY_NAME.get(name)
        if spec is None:
            raise method_not_found_error(name)

        try:
            args = spec.input_model.model_validate(arguments or {})
        except ValidationError as e:
            logger.warning(f"Invalid arguments for {name}: {e}")
            raise invalid_params_error(f"Invalid arguments for {name}: {e.error_count()} validation error(s)", {"errors": e.errors(include_url=False, include_context=False)}) from e

        logger.debug(f"Calling tool {name}")
        try:
            return await self._handlers[name](args)
        except LumaError as e:
            logger.warning(f"Tool {name} failed: {e.error_type.value} - {e.message}")
            raise
        except Exception as e:
            logger.error(f"Unexpected error in {name}: {e}", exc_info=True)
            raise wrap_tool_error(e) from e

    # ========================================================================
    # PROFILE TOOLS
    # ========================================================================

    async def _validate_api_key(self, profile: CredentialProfile) -> str | None:
        """Minimal live call; returns a warning line or None when the key works"""
        try:
            await self.session.client_for(profile).list_events(pagination_limit=1)
        except LumaError as e:
            if e.status == 401:
                return "⚠️ Luma rejected this API key (401 Unauthorized). The calendar was saved, but calls will fail until the key is fixed."
            return f"⚠️ Could not validate the API key: {e.message}. The calendar was saved anyway."
        return None

    async def configure_profile(self, args: ConfigureProfileInput) -> str:
        store = self.session.store
        await self.session.discard_client(args.name)
        profile, created = store.upsert(args.name, args.api_key, args.description)
        if args.set_as_default and store.default_profile != profile.name:
            store.set_default(profile.name)

        warning = await self._validate_api_key(profile) if args.validate_key else None

        lines = [
            f"{'✅ Calendar added' if created else '✅ Calendar updated'}: {profile.name}",
            f"- API Key: {mask_api_key(profile.api_key)}",
            f"- Description: {profile.description or 'None'}",
            f"- Default: {'Yes' if store.default_profile == profile.name else 'No'}",
            f"- Validation: {'Skipped' if not args.validate_key else ('Not confirmed' if warning else 'API key accepted')}",
        ]
        if warning:
            lines.extend(["", warning])
        return "\n".join(lines)

    async def list_profiles(self, args: EmptyInput) -> str:
        store = self.session.store
        try:
            active = self.session.active_profile().name
        except LumaError:
            active = None

        if store.is_empty():
            if active:
                return f"No calendars configured.\n\nUsing the LUMA_API_KEY environment key as '{active}'. Use configure_profile(name, api_key) to add calendars."
            return "No calendars configured. Use configure_profile(name, api_key) to add one."

        profile_list = "\n".join(
            f"{index}. **{profile.name}**{' (active)' if profile.name == active else ''}{' [default]' if profile.name == store.default_profile else ''}\n   - API Key: {mask_api_key(profile.api_key)}\n   - Description: {profile.description or 'None'}"
            for index, profile in enumerate(store.profiles, start=1)
        )
        return f"""Configured Calendars:

**Summary:**
- Total: {len(store.profiles)}
- Active: {active or 'None'}
- Default: {store.default_profile or 'None'}

**Calendars:**
{profile_list}"""

    async def switch_profile(self, args: ProfileNameInput) -> str:
        profile = self.session.set_active(args.name)
        return f"Switched to calendar **{profile.name}**.\nDescription: {profile.description or 'None'}"

    async def remove_profile(self, args: RemoveProfileInput) -> str:
        result = self.session.store.remove(args.name, confirm=args.confirm)
        if result.needs_confirmation:
            return f"⚠️ **No changes have been made.** To remove calendar '{args.name}', run remove_profile again with `confirm: true`."

        await self.session.discard_client(args.name)
        return f"""✅ Removed calendar '{result.name}'.
- Default calendar: {result.new_default or 'None'}
- Remaining calendars: {len(self.session.store.profiles)}"""

    # ========================================================================
    # EVENT TOOLS
    # ========================================================================

    async def list_events(self, args: ListEventsInput) -> str:
        response = await self.session.client().list_events(**args.model_dump())

        events_list = "\n\n".join(
            f"""{index}. **{entry.event.name}** ({entry.event.api_id})
   - Type: {classify_event_type(entry.event)}
   - Start: {format_datetime(entry.event.start_at)}
   - Timezone: {entry.event.timezone or 'Not specified'}
   - Visibility: {entry.event.visibility or 'public'}
   - URL: {entry.event.url or 'Not available'}"""
            for index, entry in enumerate(response.entries, start=1)
        )

        date_range = []
        if args.after:
            date_range.append(f"- After: {format_datetime(args.after)}")
        if args.before:
            date_range.append(f"- Before: {format_datetime(args.before)}")
        date_range_text = "\n".join(date_range) or "- All dates"

        return f"""Events List (Page Results):

**Pagination Info:**
- Showing {len(response.entries)} events
- Has more pages: {'Yes' if response.has_more else 'No'}
- Next cursor: {response.next_cursor or 'None'}

**Date Range:**
{date_range_text}

**Events:**
{events_list or 'No events found'}"""

    async def get_all_events(self, args: EmptyInput) -> str:
        entries = await self.session.client().get_all_events()
        events = [entry.event for entry in entries]

        by_visibility = Counter(event.visibility or "public" for event in events)
        by_type = Counter(classify_event_type(event) for event in events)
        visibility_summary = "\n".join(f"- {visibility.capitalize()}: {count}" for visibility, count in by_visibility.items())
        type_summary = "\n".join(f"- {kind.replace('_', ' ')}: {count}" for kind, count in by_type.items())

        far_future = datetime.max.replace(tzinfo=timezone.utc)
        chronological = sorted(events, key=lambda event: parse_datetime(event.start_at) or far_future)
        events_list = "\n\n".join(
            f"""{index}. **{event.name}** ({event.api_id})
   - Start: {format_datetime(event.start_at)}
   - Type: {classify_event_type(event)} | Visibility: {event.visibility or 'public'}
   - Location: {short_location(event)}"""
            for index, event in enumerate(chronological, start=1)
        )

        return f"""All Events Summary:

**Overview:**
- Total Events: {len(events)}

**By Visibility:**
{visibility_summary or '- None'}

**By Type:**
{type_summary or '- None'}

**All Events (Chronological):**
{events_list or 'No events found'}"""

    async def get_event(self, args: EventIdInput) -> str:
        event = await self.session.client().get_event(args.api_id)
        description = truncate(event.description, 500) if event.description else "No description provided"

        return f"""Event Details for {event.name}:

**Basic Information:**
- Event ID: {event.api_id}
- Name: {event.name}
- Description: {description}
- Type: {classify_event_type(event)}
- Timezone: {event.timezone or 'Not specified'}
- Visibility: {event.visibility or 'public'}

**Timing:**
- Start: {format_datetime(event.start_at)}
- End: {format_datetime(event.end_at, 'Not specified')}
- Duration: {describe_duration(event)}

**Location:**
{location_lines(event)}

**Meeting Info:**
- Event URL: {event.url or 'Not available'}
- Meeting URL: {event.meeting_url or event.zoom_meeting_url or 'No online meeting'}
- Cover Image: {event.cover_url or 'Not available'}

**Additional Info:**
- Created: {format_datetime(event.created_at)}
- Calendar ID: {event.calendar_api_id or 'Not available'}"""

    # ========================================================================
    # GUEST TOOLS
    # ========================================================================

    async def get_event_guest(self, args: GetEventGuestInput) -> str:
        guest = await self.session.client().get_event_guest(args.api_id, guest_api_id=args.guest_api_id, email=args.email, proxy_key=args.proxy_key)
        ticket = guest.ticket

        return f"""Guest Information:

**Basic Details:**
- Guest ID: {guest.api_id}
- Name: {guest.display_name or 'Unknown'}
- Email: {guest.display_email or 'Not provided'}
- Approval Status: {guest.approval_status or 'Not applicable'}

**Registration Details:**
- Registered: {format_datetime(guest.registered_at)}
- Invited: {format_datetime(guest.invited_at, 'Not invited')}
- Joined: {format_datetime(guest.joined_at, 'Not joined')}
- Checked In: {format_datetime(guest.checked_in_at, 'Not checked in')}

**Contact Info:**
- Phone: {guest.phone_number or 'Not provided'}
- User ID: {guest.user_api_id or 'Not available'}

**Registration Answers:**
  {format_answers(guest)}

**Ticket Info:**
- Ticket: {ticket.name if ticket and ticket.name else 'No ticket'}
- Amount: {format_amount(ticket)}

**Check-in:**
- QR Code: {guest.check_in_qr_code or 'Not available'}"""

    async def get_event_guests(self, args: GetEventGuestsInput) -> str:
        response = await self.session.client().get_event_guests(args.api_id, pagination_cursor=args.pagination_cursor, pagination_limit=args.pagination_limit)

        guests_list = "\n".join(f"{index}. {entry.guest.display_name or 'Unknown'} ({entry.guest.display_email or 'no email'}) - Status: {entry.guest.display_status}" for index, entry in enumerate(response.entries, start=1))

        return f"""Event Guests (Page Results):

**Pagination Info:**
- Showing {len(response.entries)} guests
- Has more pages: {'Yes' if response.has_more else 'No'}
- Next cursor: {response.next_cursor or 'None'}

**Guests:**
{guests_list or 'No guests found'}"""

    async def get_all_event_guests(self, args: EventIdInput) -> str:
        guests = await self.session.client().get_all_event_guests(args.api_id)

        status_summary = "\n".join(f"- {status}: {count}" for status, count in Counter(guest.display_status for guest in guests).items())
        guests_list = "\n\n".join(
            f"""{index}. {guest.display_name or 'Unknown'} ({guest.display_email or 'no email'}) - {guest.display_status}
   Company: {guest.answer_for(question_type='company') or 'Not specified'}"""
            for index, guest in enumerate(guests, start=1)
        )

        return f"""All Event Guests:

**Summary:**
- Total Guests: {len(guests)}

**By Approval Status:**
{status_summary or '- None'}

**Complete Guest List:**
{guests_list or 'No guests found'}"""

    async def get_event_summary(self, args: EventSummaryInput) -> str:
        client = self.session.client()
        event = await client.get_event(args.api_id)

        guest_summary = ""
        if args.include_guest_details:
            guests = await client.get_all_event_guests(args.api_id)
            status_breakdown = "\n".join(f"  - {status.capitalize()}: {count}" for status, count in Counter(guest.display_status for guest in guests).items())
            guest_summary = f"""

**Guest Summary:**
- Total Registered: {len(guests)}
{status_breakdown}""".rstrip()

        return f"""Complete Event Summary for "{event.name}":

**Event Details:**
- Event ID: {event.api_id}
- Type: {classify_event_type(event)}
- Start: {format_datetime(event.start_at)}
- Duration: {describe_duration(event)}
- Location: {short_location(event)}
- Visibility: {event.visibility or 'public'}
- Event URL: {event.url or 'Not available'}{guest_summary}"""

    async def update_event(self, args: UpdateEventInput) -> str:
        """
        Two-phase update. The first call only shows the diff; the caller repeats
        the call with require_approval false to apply it. Nothing is sent when the
        requested values already match the event.
        """
        client = self.session.client()
        current = await client.get_event(args.api_id)
        updates = args.requested_updates()
        changes = describe_event_changes(current, updates)

        if not changes:
            return "No changes to apply. All provided values match the current event details."

        change_list = "\n".join(changes)
        if args.require_approval:
            return f"""**Update Event: {current.name}**

Proposed changes:
{change_list}

**Do you want to proceed with these updates?**

⚠️ **No changes have been made yet.** To apply these updates, run the command again with `require_approval: false`."""

        logger.info(f"Updating event {args.api_id}: {sorted(updates)}")
        updated = await client.update_event(args.api_id, updates)

        return f"""✅ **Event Updated Successfully!**

Applied changes:
{change_list}

**Updated Event Details:**
- Event ID: {updated.api_id}
- Name: {updated.name}
- Start: {format_datetime(updated.start_at)}
- Timezone: {updated.timezone or 'Not specified'}
- Visibility: {updated.visibility or 'public'}
- URL: {updated.url or 'Not available'}"""

    # ========================================================================
    # EXPORT
    # ========================================================================

    async def _events_to_export(self, args: ExportGuestListInput, skipped: list[str]) -> list[Event]:
        client = self.session.client()
        if args.event_ids:
            events = []
            for event_id in dict.fromkeys(args.event_ids):
                try:
                    events.append(await client.get_event(event_id))
                except LumaError as e:
                    logger.warning(f"Skipping event {event_id} in export: {e.message}")
                    skipped.append(f"{event_id}: {e.message}")
            return events

        if not args.include_all_events:
            raise invalid_params_error("Provide event_ids or set include_all_events to true", {"example": "export_guest_list(include_all_events=true, include_future_only=true)"})

        events = [entry.event for entry in await client.get_all_events()]
        if args.include_future_only:
            now = datetime.now(timezone.utc)
            events = [event for event in events if (parse_datetime(event.start_at) or now) > now]
        return events

    async def export_guest_list(self, args: ExportGuestListInput) -> str:
        profile = self.session.active_profile()
        client = self.session.client()
        skipped: list[str] = []

        collected = []
        for event in await self._events_to_export(args, skipped):
            try:
                guests = await client.get_all_event_guests(event.api_id)
            except LumaError as e:
                logger.warning(f"Skipping guests of event {event.api_id} in export: {e.message}")
                skipped.append(f"{event.name} ({event.api_id}): {e.message}")
                continue
            collected.append(EventGuests(event=event, guests=guests))

        export = build_guest_export(collected, profile.name)
        path = write_guest_export(export, resolve_export_path(self.session.settings.export_dir, profile.name, args.filename))

        skipped_text = "\n".join(f"- {item}" for item in skipped)
        return f"""✅ Guest list exported

**Export Summary:**
- Calendar: {profile.name}
- Events exported: {export.event_count}
- Guest rows: {len(export.rows)}
- Question columns: {len(export.question_columns)}
- File: {path}

**Skipped:**
{skipped_text or '- None'}"""
