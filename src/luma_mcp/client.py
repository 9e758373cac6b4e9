"""Async HTTP client for the Luma public API"""

import asyncio
import logging
from typing import Any

import aiohttp
from pydantic import BaseModel, ValidationError

from .config import config
from .errors import LumaError, invalid_params_error, invalid_response_error, network_error, upstream_error
from .models import Event, EventEntry, EventEnvelope, Guest, GuestEntry, GuestEnvelope, Page
from .pagination import collect_all_pages

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-luma-api-key"


def _query_value(value: Any) -> str:
    """Render a query parameter the way the API expects it"""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parse(model: type[BaseModel], payload: Any, reason: str):
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise invalid_response_error(reason, {"errors": e.errors(include_url=False, include_context=False)}) from e


class LumaClient:
    """One client per API key; owns its aiohttp session."""

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        public_api_base_url: str | None = None,
        timeout: float | None = None,
        max_pages: int | None = None,
        session: aiohttp.ClientSession | None = None,
    ):
        self.api_key = api_key
        self.base_url = (base_url or config.api_base_url).rstrip("/")
        self.public_api_base_url = (public_api_base_url or config.public_api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.request_timeout
        self.max_pages = max_pages if max_pages is not None else config.max_pages
        self._session = session

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
        return self._session

    async def close(self):
        if self._session is not None and not self._session.closed:
            await self._session.close()

    async def _request(self, endpoint: str, method: str = "GET", params: dict[str, Any] | None = None, body: dict[str, Any] | None = None, use_public_api: bool = False) -> Any:
        """Issue one request and return the decoded JSON body"""
        base_url = self.public_api_base_url if use_public_api else self.base_url
        url = f"{base_url}{endpoint}"
        headers = {API_KEY_HEADER: self.api_key, "Content-Type": "application/json"}
        query = {key: _query_value(value) for key, value in (params or {}).items() if value is not None}

        logger.debug(f"{method} {url} params={query}")

        try:
            async with self._get_session().request(method, url, params=query or None, json=body, headers=headers) as response:
                if not 200 <= response.status < 300:
                    error_text = await response.text()
                    logger.warning(f"Luma API returned {response.status} for {method} {endpoint}")
                    raise upstream_error(response.status, error_text)
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise invalid_response_error("body is not valid JSON") from e
        except LumaError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"Network error calling {method} {endpoint}: {e!r}")
            raise network_error(e) from e

    # ========================================================================
    # EVENTS
    # ========================================================================

    async def list_events(
        self,
        pagination_cursor: str | None = None,
        pagination_limit: int | None = None,
        after: str | None = None,
        before: str | None = None,
        series_mode: str | None = None,
        include_cancelled: bool | None = None,
    ) -> Page[EventEntry]:
        params = {
            "pagination_cursor": pagination_cursor,
            "pagination_limit": pagination_limit,
            "after": after,
            "before": before,
            "series_mode": series_mode,
            "include_cancelled": include_cancelled,
        }
        payload = await self._request("/calendar/list-events", params=params, use_public_api=True)
        return _parse(Page[EventEntry], payload, "malformed event list")

    async def get_all_events(self) -> list[EventEntry]:
        """Every event on the calendar, following pagination to the end"""
        return await collect_all_pages(lambda cursor, limit: self.list_events(pagination_cursor=cursor, pagination_limit=limit), self.max_pages)

    async def get_event(self, event_api_id: str) -> Event:
        payload = await self._request("/event/get", params={"api_id": event_api_id})
        if not isinstance(payload, dict) or not payload.get("event"):
            raise invalid_response_error("missing event data")
        return _parse(EventEnvelope, payload, "malformed event data").event

    async def update_event(self, event_api_id: str, updates: dict[str, Any]) -> Event:
        """Send only the supplied fields; everything else is left untouched"""
        body = {"api_id": event_api_id, **updates}
        payload = await self._request("/event/update", method="POST", body=body, use_public_api=True)
        if not isinstance(payload, dict) or not payload.get("event"):
            raise invalid_response_error("missing event data")
        return _parse(EventEnvelope, payload, "malformed event data").event

    # ========================================================================
    # GUESTS
    # ========================================================================

    async def get_event_guest(self, event_api_id: str, guest_api_id: str | None = None, email: str | None = None, proxy_key: str | None = None) -> Guest:
        """Look up one guest; the first identifier supplied wins (id, email, proxy key)"""
        params = {"event_api_id": event_api_id}
        if guest_api_id:
            params["guest_api_id"] = guest_api_id
        elif email:
            params["email"] = email
        elif proxy_key:
            params["proxy_key"] = proxy_key
        else:
            raise invalid_params_error("Must provide either guest_api_id, email, or proxy_key to identify the guest")

        payload = await self._request("/event/get-guest", params=params)
        if not isinstance(payload, dict) or not payload.get("guest"):
            raise invalid_response_error("missing guest data")
        return _parse(GuestEnvelope, payload, "malformed guest data").guest

    async def get_event_guests(self, event_api_id: str, pagination_cursor: str | None = None, pagination_limit: int | None = None) -> Page[GuestEntry]:
        params = {"event_api_id": event_api_id, "pagination_cursor": pagination_cursor, "pagination_limit": pagination_limit}
        payload = await self._request("/event/get-guests", params=params)
        return _parse(Page[GuestEntry], payload, "malformed guest list")

    async def get_all_event_guests(self, event_api_id: str) -> list[Guest]:
        entries = await collect_all_pages(lambda cursor, limit: self.get_event_guests(event_api_id, pagination_cursor=cursor, pagination_limit=limit), self.max_pages)
        return [entry.guest for entry in entries]
