#!/usr/bin/env python3
"""Tests for the Luma API client: request shape, error mapping and envelopes"""

import asyncio
import sys
import unittest
from pathlib import Path

import aiohttp

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from fakes import FakeResponse, FakeSession, event_payload, guest_payload
from luma_mcp.client import API_KEY_HEADER, LumaClient
from luma_mcp.errors import ErrorType, LumaError


def make_client(*responses):
    session = FakeSession(*responses)
    client = LumaClient("secret-key", base_url="https://api.test/v1", public_api_base_url="https://public.test/v1", timeout=5, max_pages=10, session=session)
    return client, session


class TestRequests(unittest.TestCase):
    """Headers, URLs and query parameters"""

    def test_auth_and_content_type_headers(self):
        client, session = make_client(FakeResponse(payload={"event": event_payload()}))
        asyncio.run(client.get_event("evt-1"))

        headers = session.calls[0]["headers"]
        self.assertEqual(headers[API_KEY_HEADER], "secret-key")
        self.assertEqual(headers["Content-Type"], "application/json")
        self.assertEqual(session.calls[0]["url"], "https://api.test/v1/event/get")
        self.assertEqual(session.calls[0]["params"], {"api_id": "evt-1"})

    def test_list_events_uses_listing_api_and_drops_unset_params(self):
        client, session = make_client(FakeResponse(payload={"entries": [], "has_more": False}))
        page = asyncio.run(client.list_events(pagination_limit=25, after="2025-06-01T00:00:00Z", include_cancelled=False))

        call = session.calls[0]
        self.assertEqual(call["method"], "GET")
        self.assertEqual(call["url"], "https://public.test/v1/calendar/list-events")
        self.assertEqual(call["params"], {"pagination_limit": "25", "after": "2025-06-01T00:00:00Z", "include_cancelled": "false"})
        self.assertEqual(page.entries, [])
        self.assertFalse(page.has_more)

    def test_update_event_sends_only_supplied_fields(self):
        client, session = make_client(FakeResponse(payload={"event": event_payload(name="Renamed")}))
        event = asyncio.run(client.update_event("evt-1", {"name": "Renamed"}))

        call = session.calls[0]
        self.assertEqual(call["method"], "POST")
        self.assertEqual(call["url"], "https://public.test/v1/event/update")
        self.assertEqual(call["json"], {"api_id": "evt-1", "name": "Renamed"})
        self.assertEqual(event.name, "Renamed")


class TestErrorMapping(unittest.TestCase):
    """Non-2xx statuses and transport failures"""

    def assert_upstream(self, status, expected_text):
        client, _ = make_client(FakeResponse(status=status, text="boom"))
        with self.assertRaises(LumaError) as ctx:
            asyncio.run(client.get_event("evt-1"))
        self.assertEqual(ctx.exception.error_type, ErrorType.UPSTREAM_ERROR)
        self.assertEqual(ctx.exception.status, status)
        self.assertEqual(ctx.exception.details["body"], "boom")
        self.assertIn(expected_text, ctx.exception.message)

    def test_unauthorized(self):
        self.assert_upstream(401, "Unauthorized")

    def test_not_found(self):
        self.assert_upstream(404, "Not found")

    def test_rate_limited(self):
        self.assert_upstream(429, "Wait 1 minute")

    def test_other_status_carries_body(self):
        self.assert_upstream(500, "API error (500): boom")

    def test_network_failure(self):
        client, _ = make_client(aiohttp.ClientConnectionError("connection refused"))
        with self.assertRaises(LumaError) as ctx:
            asyncio.run(client.get_event("evt-1"))
        self.assertEqual(ctx.exception.error_type, ErrorType.NETWORK_ERROR)
        self.assertIn("connection refused", ctx.exception.message)

    def test_timeout_is_network_error(self):
        client, _ = make_client(asyncio.TimeoutError())
        with self.assertRaises(LumaError) as ctx:
            asyncio.run(client.list_events())
        self.assertEqual(ctx.exception.error_type, ErrorType.NETWORK_ERROR)

    def test_non_json_body(self):
        client, _ = make_client(FakeResponse(text="<html>oops</html>"))
        with self.assertRaises(LumaError) as ctx:
            asyncio.run(client.get_event("evt-1"))
        self.assertEqual(ctx.exception.error_type, ErrorType.INVALID_RESPONSE)


class TestEnvelopes(unittest.TestCase):
    """Nested resource keys are required"""

    def test_get_event_without_event_key(self):
        client, _ = make_client(FakeResponse(payload={"something": "else"}))
        with self.assertRaises(LumaError) as ctx:
            asyncio.run(client.get_event("evt-1"))
        self.assertEqual(ctx.exception.error_type, ErrorType.INVALID_RESPONSE)
        self.assertIn("missing event data", ctx.exception.message)

    def test_update_event_without_echo(self):
        client, _ = make_client(FakeResponse(payload={}))
        with self.assertRaises(LumaError) as ctx:
            asyncio.run(client.update_event("evt-1", {"name": "x"}))
        self.assertEqual(ctx.exception.error_type, ErrorType.INVALID_RESPONSE)

    def test_get_guest_without_guest_key(self):
        client, _ = make_client(FakeResponse(payload={"entries": []}))
        with self.assertRaises(LumaError) as ctx:
            asyncio.run(client.get_event_guest("evt-1", email="a@example.com"))
        self.assertIn("missing guest data", ctx.exception.message)

    def test_event_missing_api_id_is_invalid(self):
        client, _ = make_client(FakeResponse(payload={"event": {"name": "No id"}}))
        with self.assertRaises(LumaError) as ctx:
            asyncio.run(client.get_event("evt-1"))
        self.assertEqual(ctx.exception.error_type, ErrorType.INVALID_RESPONSE)


class TestGuestLookup(unittest.TestCase):
    """Guest identifier selection"""

    def test_no_identifier_fails_without_request(self):
        client, session = make_client()
        with self.assertRaises(LumaError) as ctx:
            asyncio.run(client.get_event_guest("evt-1"))
        self.assertEqual(ctx.exception.error_type, ErrorType.INVALID_PARAMS)
        self.assertEqual(session.calls, [])

    def test_guest_id_wins_over_email_and_proxy_key(self):
        client, session = make_client(FakeResponse(payload={"guest": guest_payload()}))
        asyncio.run(client.get_event_guest("evt-1", guest_api_id="gst-1", email="a@example.com", proxy_key="pk"))
        self.assertEqual(session.calls[0]["params"], {"event_api_id": "evt-1", "guest_api_id": "gst-1"})

    def test_email_wins_over_proxy_key(self):
        client, session = make_client(FakeResponse(payload={"guest": guest_payload()}))
        guest = asyncio.run(client.get_event_guest("evt-1", email="a@example.com", proxy_key="pk"))
        self.assertEqual(session.calls[0]["params"], {"event_api_id": "evt-1", "email": "a@example.com"})
        self.assertEqual(guest.api_id, "gst-1")

    def test_proxy_key_alone(self):
        client, session = make_client(FakeResponse(payload={"guest": guest_payload()}))
        asyncio.run(client.get_event_guest("evt-1", proxy_key="pk"))
        self.assertEqual(session.calls[0]["params"]["proxy_key"], "pk")


class TestAggregation(unittest.TestCase):
    """get_all_* helpers follow cursors at the maximum page size"""

    def test_get_all_event_guests_flattens_entries(self):
        client, session = make_client(
            FakeResponse(payload={"entries": [{"api_id": "g1", "guest": guest_payload("g1")}], "has_more": True, "next_cursor": "c1"}),
            FakeResponse(payload={"entries": [{"api_id": "g2", "guest": guest_payload("g2")}], "has_more": False}),
        )
        guests = asyncio.run(client.get_all_event_guests("evt-1"))

        self.assertEqual([guest.api_id for guest in guests], ["g1", "g2"])
        self.assertEqual(session.calls[0]["params"], {"event_api_id": "evt-1", "pagination_limit": "100"})
        self.assertEqual(session.calls[1]["params"], {"event_api_id": "evt-1", "pagination_cursor": "c1", "pagination_limit": "100"})

    def test_null_lists_and_names_are_tolerated(self):
        nulls = guest_payload("g1", name=None, registration_answers=None, event_tickets=None, approval_status=None)
        client, _ = make_client(FakeResponse(payload={"entries": [{"api_id": "g1", "guest": nulls}], "has_more": False, "next_cursor": None}))
        guests = asyncio.run(client.get_all_event_guests("evt-1"))

        self.assertEqual(guests[0].registration_answers, [])
        self.assertEqual(guests[0].event_tickets, [])
        self.assertIsNone(guests[0].name)
        self.assertEqual(guests[0].display_status, "pending")

    def test_null_event_fields_are_tolerated(self):
        entry = {"api_id": "e1", "event": event_payload("e1", name=None), "tags": None}
        client, _ = make_client(FakeResponse(payload={"entries": [entry], "has_more": False}))
        events = asyncio.run(client.get_all_events())

        self.assertEqual(events[0].event.name, "")
        self.assertEqual(events[0].tags, [])

    def test_close_closes_session(self):
        client, session = make_client()
        asyncio.run(client.close())
        self.assertTrue(session.closed)


if __name__ == "__main__":
    unittest.main()
