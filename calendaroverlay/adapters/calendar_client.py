"""
HTTP client for fetching busy intervals from the scheduling backend.
"""

import asyncio
import logging
from typing import Any, Dict, List

import pendulum
import requests
from pendulum import DateTime

from ..domain.exceptions import CalendarAPIError
from ..domain.models import BusyInterval

logger = logging.getLogger(__name__)


class CalendarClient:
    """
    Client for the backend's calendar endpoints.

    The backend aggregates the user's connected calendar accounts and
    returns their events keyed by calendar account key.
    """

    def __init__(self, base_url: str, access_token: str | None = None, timezone=None):
        """
        Initialize the client.

        Args:
            base_url: Root URL of the scheduling backend API
            access_token: Optional bearer token
            timezone: Timezone to express fetched dates in, UTC if omitted
        """
        self.base_url = base_url.rstrip("/")
        self.timezone = timezone or "UTC"
        self.headers = {"Accept": "application/json"}
        if access_token:
            self.headers["Authorization"] = f"Bearer {access_token}"

    async def get_calendar_events(
        self,
        time_min: DateTime,
        time_max: DateTime,
        event_id: str = ""
    ) -> Dict[str, List[BusyInterval]]:
        """
        Get busy intervals between ``time_min`` and ``time_max``.

        Without ``event_id`` the signed-in user's calendars are fetched,
        otherwise the calendar availabilities shared with that event.

        Raises:
            CalendarAPIError: If the request fails or the payload is not a mapping
        """
        if event_id:
            url = f"{self.base_url}/events/{event_id}/calendar-availabilities"
        else:
            url = f"{self.base_url}/user/calendars"

        params = {
            "timeMin": time_min.in_timezone("UTC").to_iso8601_string(),
            "timeMax": time_max.in_timezone("UTC").to_iso8601_string(),
        }

        data = await asyncio.to_thread(self._get, url, params)
        return self._parse_calendar_events(data)

    def _get(self, url: str, params: Dict[str, str]) -> Any:
        try:
            response = requests.get(url, headers=self.headers, params=params, timeout=30)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            raise CalendarAPIError(f"Failed to fetch calendar events from {url}: {e}") from e
        except ValueError as e:
            raise CalendarAPIError(f"Invalid JSON returned by {url}: {e}") from e

    def _parse_calendar_events(self, response_data: Any) -> Dict[str, List[BusyInterval]]:
        """
        Parse the calendar events response into our domain model.

        Response format:
        {
            "user@example.com_google": {
                "calendarEvents": [
                    {"startDate": "...", "endDate": "...", "summary": "..."}
                ],
                "error": ""
            }
        }

        A bare list of events per account is accepted as well.
        """
        if not isinstance(response_data, dict):
            raise CalendarAPIError("Calendar events response must be a mapping of accounts")

        busy_intervals: Dict[str, List[BusyInterval]] = {}

        for account, payload in response_data.items():
            if isinstance(payload, dict):
                error = payload.get("error")
                if error:
                    logger.warning("Calendar account %s returned an error: %s", account, error)
                    continue
                records = payload.get("calendarEvents") or []
            else:
                records = payload or []

            if not isinstance(records, list):
                logger.warning("Skipping calendar account %s: events are not a list", account)
                continue

            intervals: List[BusyInterval] = []
            for record in records:
                try:
                    intervals.append(self._parse_record(record))
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning("Skipping calendar event of %s: %s", account, e)

            busy_intervals[account] = intervals

        return busy_intervals

    def _parse_record(self, record: Dict[str, Any]) -> BusyInterval:
        if not isinstance(record, dict):
            raise ValueError(f"Calendar event must be a mapping, got {type(record).__name__}")
        metadata = {
            key: value for key, value in record.items()
            if key not in ("startDate", "endDate")
        }
        return BusyInterval(
            start=self._parse_datetime(record["startDate"]),
            end=self._parse_datetime(record["endDate"]),
            metadata=metadata
        )

    def _parse_datetime(self, datetime_str: str) -> DateTime:
        """
        Parse an ISO 8601 string into a pendulum DateTime in the client timezone.
        """
        dt = pendulum.parse(datetime_str)

        if isinstance(dt, DateTime):
            return dt.in_timezone(self.timezone)

        raise ValueError(f"Could not parse datetime: {datetime_str}")
