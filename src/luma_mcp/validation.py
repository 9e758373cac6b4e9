"""Input validation for Luma MCP tools

Each model doubles as the JSON schema advertised in list_tools.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import EventType, Visibility


class ToolInput(BaseModel):
    """Base for tool arguments"""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class EmptyInput(ToolInput):
    pass


class EventIdInput(ToolInput):
    api_id: str = Field(..., min_length=1, description="The event ID (e.g., 'evt-12345') - you can find this from list_events")

    @field_validator("api_id")
    @classmethod
    def strip_api_id(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("api_id cannot be empty")
        return v


# ============================================================================
# PROFILES
# ============================================================================


class ConfigureProfileInput(ToolInput):
    name: str = Field(..., min_length=1, max_length=100, description="Calendar name used to refer to this API key")
    api_key: str = Field(..., min_length=1, description="Luma API key for the calendar")
    description: str | None = Field(None, description="Optional note about the calendar")
    set_as_default: bool = Field(False, description="Use this calendar by default on future starts")
    validate_key: bool = Field(True, alias="validate", description="Check the key against the Luma API before finishing (default: true)")

    @field_validator("name", "api_key")
    @classmethod
    def strip_value(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Value cannot be blank")
        return v


class ProfileNameInput(ToolInput):
    name: str = Field(..., min_length=1, description="Calendar name as shown by list_profiles")


class RemoveProfileInput(ProfileNameInput):
    confirm: bool = Field(False, description="Must be true to actually remove the calendar")


# ============================================================================
# EVENTS & GUESTS
# ============================================================================


class ListEventsInput(ToolInput):
    pagination_cursor: str | None = Field(None, description="Continue from a previous page (leave empty for first page)")
    pagination_limit: int | None = Field(None, ge=1, le=100, description="Number of events to show (1-100, default 50)")
    after: str | None = Field(None, description="Show events starting after this date (e.g., '2025-06-01T00:00:00Z')")
    before: str | None = Field(None, description="Show events starting before this date (e.g., '2025-12-31T23:59:59Z')")
    series_mode: Literal["instances", "series"] | None = Field(None, description="How to handle recurring events")
    include_cancelled: bool | None = Field(None, description="Include cancelled events in results (default: false)")


class GetEventGuestInput(EventIdInput):
    guest_api_id: str | None = Field(None, description="The guest's ID (use this OR email OR proxy_key)")
    email: str | None = Field(None, description="Guest's email address (use this OR guest_api_id OR proxy_key)")
    proxy_key: str | None = Field(None, description="Guest's proxy key (use this OR guest_api_id OR email)")


class GetEventGuestsInput(EventIdInput):
    pagination_cursor: str | None = Field(None, description="Continue from a previous page (leave empty for first page)")
    pagination_limit: int | None = Field(None, ge=1, le=100, description="Number of guests to show (1-100, default 50)")


class EventSummaryInput(EventIdInput):
    include_guest_details: bool = Field(True, description="Include guest analytics in the summary (default: true)")


class UpdateEventInput(EventIdInput):
    name: str | None = Field(None, description="New event name")
    description: str | None = Field(None, description="New event description")
    start_at: str | None = Field(None, description="New start date/time (ISO 8601 format, e.g., '2025-06-15T18:00:00Z')")
    end_at: str | None = Field(None, description="New end date/time (ISO 8601 format)")
    timezone: str | None = Field(None, description="New timezone (e.g., 'America/New_York', 'Europe/London')")
    event_type: EventType | None = Field(None, description="Event type")
    geo_address_json: dict[str, Any] | None = Field(None, description="Location details for in-person events, sent as given")
    geo_latitude: str | None = Field(None, description="Latitude for location")
    geo_longitude: str | None = Field(None, description="Longitude for location")
    visibility: Visibility | None = Field(None, description="Event visibility")
    meeting_url: str | None = Field(None, description="Meeting URL for online events")
    zoom_meeting_url: str | None = Field(None, description="Zoom meeting URL")
    cover_url: str | None = Field(None, description="URL for event cover image")
    require_approval: bool = Field(True, description="Show the proposed changes without applying them (default: true). Pass false to apply.")

    def requested_updates(self) -> dict:
        """Fields the caller actually supplied, ready for the update call"""
        fields = self.model_fields_set - {"api_id", "require_approval"}
        return {field: getattr(self, field) for field in sorted(fields) if getattr(self, field) is not None}


# ============================================================================
# EXPORT
# ============================================================================


class ExportGuestListInput(ToolInput):
    event_ids: list[str] | None = Field(None, description="Event IDs to export")
    include_all_events: bool = Field(False, description="Export every event on the active calendar")
    include_future_only: bool = Field(False, description="With include_all_events, only export events that have not started yet")
    filename: str | None = Field(None, description="Output file name (default: luma-guests-<calendar>-<date>.csv)")
