"""
Tests for the HTTP and mock calendar clients.
"""

import asyncio
import json

import pendulum
import pytest
import requests

from calendaroverlay.adapters.calendar_client import CalendarClient
from calendaroverlay.adapters.mock_calendar_client import MockCalendarClient
from calendaroverlay.domain.exceptions import CalendarAPIError

TIME_MIN = pendulum.datetime(2024, 11, 25, 0, 0, tz="UTC")
TIME_MAX = pendulum.datetime(2024, 11, 28, 0, 0, tz="UTC")


class FakeResponse:
    """Just enough of requests.Response for the client."""

    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        return self._payload


class TestCalendarClient:
    """Tests for CalendarClient."""

    def _patch_get(self, monkeypatch, response):
        calls = []

        def fake_get(url, headers=None, params=None, timeout=None):
            calls.append({"url": url, "headers": headers, "params": params})
            if isinstance(response, Exception):
                raise response
            return response

        monkeypatch.setattr(requests, "get", fake_get)
        return calls

    def test_fetches_user_calendars(self, monkeypatch):
        """Test the request and the parsed busy intervals."""
        payload = {
            "a@example.com_google": {
                "calendarEvents": [
                    {
                        "startDate": "2024-11-25T08:00:00Z",
                        "endDate": "2024-11-25T10:00:00Z",
                        "summary": "Standup",
                    }
                ],
                "error": "",
            }
        }
        calls = self._patch_get(monkeypatch, FakeResponse(payload))
        client = CalendarClient("https://schedule.example.com/api/", access_token="t0k", timezone="Europe/Berlin")

        result = asyncio.run(client.get_calendar_events(TIME_MIN, TIME_MAX))

        assert calls[0]["url"] == "https://schedule.example.com/api/user/calendars"
        assert calls[0]["headers"]["Authorization"] == "Bearer t0k"
        assert pendulum.parse(calls[0]["params"]["timeMin"]) == TIME_MIN
        interval = result["a@example.com_google"][0]
        assert interval.start == pendulum.datetime(2024, 11, 25, 8, 0, tz="UTC")
        assert interval.start.timezone_name == "Europe/Berlin"
        assert interval.metadata == {"summary": "Standup"}

    def test_event_availabilities_url(self, monkeypatch):
        """Test fetching the calendars shared with an event."""
        calls = self._patch_get(monkeypatch, FakeResponse({}))
        client = CalendarClient("https://schedule.example.com/api")

        result = asyncio.run(client.get_calendar_events(TIME_MIN, TIME_MAX, event_id="64f0c2"))

        assert result == {}
        assert calls[0]["url"] == "https://schedule.example.com/api/events/64f0c2/calendar-availabilities"
        assert "Authorization" not in calls[0]["headers"]

    def test_accounts_with_errors_and_bad_records_are_skipped(self, monkeypatch):
        """Test tolerant parsing of partially broken payloads."""
        payload = {
            "broken@example.com_google": {"calendarEvents": [], "error": "token expired"},
            "b@example.com_outlook": [
                {"startDate": "not a date", "endDate": "2024-11-25T10:00:00Z"},
                {"endDate": "2024-11-25T10:00:00Z"},
                {"startDate": "2024-11-26T09:00:00Z", "endDate": "2024-11-26T09:30:00Z"},
            ],
        }
        self._patch_get(monkeypatch, FakeResponse(payload))

        result = asyncio.run(CalendarClient("http://localhost").get_calendar_events(TIME_MIN, TIME_MAX))

        assert list(result) == ["b@example.com_outlook"]
        assert len(result["b@example.com_outlook"]) == 1

    def test_non_mapping_records_are_skipped(self, monkeypatch):
        """Test that records and event lists of the wrong shape are skipped."""
        payload = {
            "a@example.com_google": [
                "garbage",
                {"startDate": "2024-11-26T09:00:00Z", "endDate": "2024-11-26T09:30:00Z"},
            ],
            "b@example.com_google": {"calendarEvents": {"startDate": "2024-11-26T09:00:00Z"}},
        }
        self._patch_get(monkeypatch, FakeResponse(payload))

        result = asyncio.run(CalendarClient("http://localhost").get_calendar_events(TIME_MIN, TIME_MAX))

        assert list(result) == ["a@example.com_google"]
        assert result["a@example.com_google"][0].start == pendulum.datetime(2024, 11, 26, 9, 0, tz="UTC")

    def test_request_failure_raises_calendar_api_error(self, monkeypatch):
        """Test that transport errors are wrapped."""
        self._patch_get(monkeypatch, requests.exceptions.ConnectionError("refused"))

        with pytest.raises(CalendarAPIError, match="Failed to fetch"):
            asyncio.run(CalendarClient("http://localhost").get_calendar_events(TIME_MIN, TIME_MAX))

    def test_http_error_raises_calendar_api_error(self, monkeypatch):
        """Test that error statuses are wrapped."""
        self._patch_get(monkeypatch, FakeResponse({}, status_code=502))

        with pytest.raises(CalendarAPIError):
            asyncio.run(CalendarClient("http://localhost").get_calendar_events(TIME_MIN, TIME_MAX))

    def test_non_mapping_payload_raises(self, monkeypatch):
        """Test that a malformed payload is reported."""
        self._patch_get(monkeypatch, FakeResponse(["unexpected"]))

        with pytest.raises(CalendarAPIError, match="mapping"):
            asyncio.run(CalendarClient("http://localhost").get_calendar_events(TIME_MIN, TIME_MAX))


class TestMockCalendarClient:
    """Tests for MockCalendarClient."""

    def test_filters_events_by_range_and_groups_by_account(self, tmp_path):
        """Test serving events from a JSON file."""
        data_file = tmp_path / "events.json"
        data_file.write_text(
            json.dumps(
                [
                    {
                        "account": "a@example.com_google",
                        "summary": "In range",
                        "startDate": "2024-11-25T09:00:00Z",
                        "endDate": "2024-11-25T10:00:00Z",
                    },
                    {
                        "account": "a@example.com_google",
                        "summary": "Too late",
                        "startDate": "2024-12-25T09:00:00Z",
                        "endDate": "2024-12-25T10:00:00Z",
                    },
                    {"account": "a@example.com_google", "summary": "No dates"},
                ]
            ),
            encoding="utf-8",
        )

        result = asyncio.run(MockCalendarClient(data_file=data_file).get_calendar_events(TIME_MIN, TIME_MAX))

        intervals = result["a@example.com_google"]
        assert [interval.metadata["summary"] for interval in intervals] == ["In range"]

    def test_non_datetime_values_are_skipped(self, tmp_path):
        """Test that dates parsing to something other than a date-time are skipped."""
        data_file = tmp_path / "events.json"
        data_file.write_text(
            json.dumps(
                [
                    {"account": "a@example.com_google", "startDate": "P1D", "endDate": "P2D"},
                    {
                        "account": "a@example.com_google",
                        "summary": "Valid",
                        "startDate": "2024-11-25T09:00:00Z",
                        "endDate": "2024-11-25T10:00:00Z",
                    },
                ]
            ),
            encoding="utf-8",
        )

        result = asyncio.run(MockCalendarClient(data_file=data_file).get_calendar_events(TIME_MIN, TIME_MAX))

        assert [interval.metadata["summary"] for interval in result["a@example.com_google"]] == ["Valid"]

    def test_bundled_data_loads(self):
        """Test that the packaged sample data is readable."""
        client = MockCalendarClient()

        assert client.calendar_events
        result = asyncio.run(client.get_calendar_events(TIME_MIN, TIME_MAX))
        assert "alex@example.com_google" in result

    def test_missing_file_serves_nothing(self, tmp_path):
        """Test the empty fallback."""
        client = MockCalendarClient(data_file=tmp_path / "missing.json")

        assert asyncio.run(client.get_calendar_events(TIME_MIN, TIME_MAX)) == {}
