#!/usr/bin/env python3
"""Tests for event classification, durations, locations and the update diff"""

import sys
import unittest
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from luma_mcp.formatting import (
    answer_text,
    classify_event_type,
    describe_duration,
    describe_event_changes,
    format_amount,
    location_lines,
    parse_datetime,
    short_location,
)
from luma_mcp.models import Event, EventTicket

ADDRESS = {"city": "Berlin", "address": "Alexanderplatz 1", "country": "Germany"}


def make_event(**fields):
    return Event.model_validate({"api_id": "evt-1", "name": "Launch", "start_at": "2030-06-15T18:00:00Z", **fields})


class TestClassifyEventType(unittest.TestCase):
    def test_meeting_url_only_is_online(self):
        self.assertEqual(classify_event_type(make_event(meeting_url="https://meet.test/x")), "online")

    def test_meeting_url_and_address_is_hybrid(self):
        self.assertEqual(classify_event_type(make_event(meeting_url="https://meet.test/x", geo_address_json=ADDRESS)), "hybrid")

    def test_address_only_is_in_person(self):
        self.assertEqual(classify_event_type(make_event(geo_address_json=ADDRESS)), "in_person")

    def test_neither_is_unknown(self):
        self.assertEqual(classify_event_type(make_event()), "unknown")

    def test_zoom_url_counts_as_meeting(self):
        self.assertEqual(classify_event_type(make_event(zoom_meeting_url="https://zoom.test/1")), "online")


class TestDuration(unittest.TestCase):
    def test_iso_duration(self):
        self.assertEqual(describe_duration(make_event(duration_interval="P0Y0M1DT11H0M0S")), "1 day, 11 hours")

    def test_iso_duration_minutes(self):
        self.assertEqual(describe_duration(make_event(duration_interval="PT1H30M")), "1 hour, 30 minutes")

    def test_zero_duration(self):
        self.assertEqual(describe_duration(make_event(duration_interval="PT0S")), "Unknown duration")

    def test_falls_back_to_start_and_end(self):
        self.assertEqual(describe_duration(make_event(end_at="2030-06-15T21:00:00Z")), "3 hours")

    def test_nothing_to_go_on(self):
        self.assertEqual(describe_duration(make_event()), "Not specified")


class TestLocation(unittest.TestCase):
    def test_short_location_prefers_city(self):
        self.assertEqual(short_location(make_event(geo_address_json=ADDRESS)), "Berlin")

    def test_short_location_without_address(self):
        self.assertEqual(short_location(make_event()), "Not specified")

    def test_location_lines_prefer_full_address(self):
        lines = location_lines(make_event(geo_address_json={**ADDRESS, "full_address": "Alexanderplatz 1, 10178 Berlin"}))
        self.assertIn("- Address: Alexanderplatz 1, 10178 Berlin", lines)
        self.assertIn("- Country: Germany", lines)

    def test_location_lines_without_address(self):
        self.assertEqual(location_lines(make_event()), "- No location information available")


class TestSmallHelpers(unittest.TestCase):
    def test_parse_datetime_handles_z_suffix(self):
        self.assertEqual(parse_datetime("2030-06-15T18:00:00Z"), parse_datetime("2030-06-15T18:00:00+00:00"))
        self.assertIsNone(parse_datetime("not a date"))

    def test_answer_text(self):
        self.assertEqual(answer_text(True), "Yes")
        self.assertEqual(answer_text(["a", "b"]), "a, b")
        self.assertEqual(answer_text(None), "")

    def test_format_amount(self):
        self.assertEqual(format_amount(EventTicket(name="GA", amount=25, currency="usd")), "USD 25")
        self.assertEqual(format_amount(None), "N/A")


class TestEventChanges(unittest.TestCase):
    def test_matching_values_produce_no_changes(self):
        current = make_event(timezone="UTC", visibility="public")
        updates = {"name": "Launch", "start_at": "2030-06-15T18:00:00.000Z", "timezone": "UTC", "visibility": "public"}
        self.assertEqual(describe_event_changes(current, updates), [])

    def test_changed_fields_listed(self):
        current = make_event(timezone="UTC")
        changes = describe_event_changes(current, {"name": "Relaunch", "timezone": "Europe/Berlin"})
        self.assertEqual(changes, ['- Name: "Launch" → "Relaunch"', "- Timezone: UTC → Europe/Berlin"])

    def test_event_type_compared_with_derived_type(self):
        current = make_event(meeting_url="https://meet.test/x")
        self.assertEqual(describe_event_changes(current, {"event_type": "online"}), [])
        self.assertEqual(describe_event_changes(current, {"event_type": "hybrid"}), ["- Type: online → hybrid"])

    def test_location_change(self):
        current = make_event(geo_address_json=ADDRESS)
        self.assertEqual(describe_event_changes(current, {"geo_address_json": ADDRESS}), [])
        changes = describe_event_changes(current, {"geo_address_json": {"city": "Paris"}})
        self.assertEqual(changes, ["- Location: Alexanderplatz 1 → Paris"])

    def test_location_compares_whole_address(self):
        current = make_event(geo_address_json={**ADDRESS, "place_id": "ChIJ-old"})
        self.assertEqual(describe_event_changes(current, {"geo_address_json": {**ADDRESS, "place_id": "ChIJ-old"}}), [])
        self.assertEqual(len(describe_event_changes(current, {"geo_address_json": {**ADDRESS, "place_id": "ChIJ-new"}})), 1)

    def test_description_is_truncated(self):
        changes = describe_event_changes(make_event(), {"description": "x" * 80})
        self.assertEqual(changes, [f'- Description: (empty) → "{"x" * 50}..."'])


if __name__ == "__main__":
    unittest.main()
