"""Response schemas for the Luma API and the local credential store"""

from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

T = TypeVar("T")

Visibility = Literal["public", "private", "unlisted"]
EventType = Literal["in_person", "online", "hybrid"]


class LumaModel(BaseModel):
    """Base for API payloads; unknown fields are ignored"""

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        """JSON null falls back to the field default"""
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class GeoAddress(LumaModel):
    """Geographic address attached to in-person events."""

    model_config = ConfigDict(extra="allow")

    city: str | None = None
    region: str | None = None
    address: str | None = None
    country: str | None = None
    full_address: str | None = None
    description: str | None = None


class Event(LumaModel):
    """Event as returned by the event and list endpoints."""

    api_id: str
    name: str = ""
    description: str | None = None
    start_at: str | None = None
    end_at: str | None = None
    duration_interval: str | None = None
    timezone: str | None = None
    event_type: str | None = None
    cover_url: str | None = None
    url: str | None = None
    geo_address_json: GeoAddress | None = None
    geo_latitude: str | float | None = None
    geo_longitude: str | float | None = None
    visibility: str | None = None
    meeting_url: str | None = None
    zoom_meeting_url: str | None = None
    user_api_id: str | None = None
    calendar_api_id: str | None = None
    created_at: str | None = None


class Tag(LumaModel):
    api_id: str | None = None
    name: str = ""


class EventEntry(LumaModel):
    """Entry of the calendar list-events page"""

    api_id: str | None = None
    event: Event
    tags: list[Tag] = Field(default_factory=list)


class RegistrationAnswer(LumaModel):
    label: str = ""
    answer: Any = None
    question_id: str | None = None
    question_type: str | None = None


class EventTicket(LumaModel):
    api_id: str | None = None
    name: str | None = None
    amount: float | None = None
    currency: str | None = None
    checked_in_at: str | None = None


class Guest(LumaModel):
    """Guest registered to a single event."""

    api_id: str
    name: str | None = None
    email: str | None = None
    approval_status: str | None = None
    created_at: str | None = None
    registered_at: str | None = None
    invited_at: str | None = None
    joined_at: str | None = None
    checked_in_at: str | None = None
    user_api_id: str | None = None
    user_name: str | None = None
    user_email: str | None = None
    user_first_name: str | None = None
    user_last_name: str | None = None
    phone_number: str | None = None
    check_in_qr_code: str | None = None
    registration_answers: list[RegistrationAnswer] = Field(default_factory=list)
    event_tickets: list[EventTicket] = Field(default_factory=list)
    event_ticket: EventTicket | None = None

    @property
    def display_status(self) -> str:
        """Approval status, with an absent status shown as pending"""
        return self.approval_status or "pending"

    @property
    def display_name(self) -> str | None:
        return self.name or self.user_name

    @property
    def display_email(self) -> str | None:
        return self.email or self.user_email

    @property
    def ticket(self) -> EventTicket | None:
        """Registration ticket, falling back to the first listed ticket"""
        return self.event_ticket or (self.event_tickets[0] if self.event_tickets else None)

    def answer_for(self, *, question_type: str) -> Any:
        """Return the first registration answer of the given question type"""
        for item in self.registration_answers:
            if item.question_type == question_type:
                return item.answer
        return None


class GuestEntry(LumaModel):
    api_id: str | None = None
    guest: Guest


class Page(LumaModel, Generic[T]):
    """One page of a cursor paginated listing"""

    entries: list[T] = Field(default_factory=list)
    has_more: bool = False
    next_cursor: str | None = None


class EventEnvelope(LumaModel):
    event: Event


class GuestEnvelope(LumaModel):
    guest: Guest


# ============================================================================
# CREDENTIAL STORE
# ============================================================================


class CredentialProfile(BaseModel):
    """Named API key for one Luma calendar"""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    api_key: str = Field(alias="apiKey", min_length=1, repr=False)
    description: str | None = None


class CredentialStoreData(BaseModel):
    """On-disk document holding every configured calendar"""

    model_config = ConfigDict(populate_by_name=True)

    profiles: list[CredentialProfile] = Field(default_factory=list)
    default_profile: str | None = Field(default=None, alias="defaultProfile")
