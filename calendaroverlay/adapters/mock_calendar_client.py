"""
Mock calendar client for running without a scheduling backend.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import pendulum
from pendulum import DateTime

from ..domain.models import BusyInterval

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_calendar_data.json"


class MockCalendarClient:
    """
    Mock client that serves calendar events from a JSON file.

    Each entry of the file names the calendar account it belongs to:
    ``{"account": "...", "startDate": "...", "endDate": "...", ...}``.
    """

    def __init__(self, data_file: Path | None = None, timezone=None):
        """
        Initialize the mock client.

        Args:
            data_file: JSON file with events, defaults to the bundled sample
            timezone: Timezone to express dates in, UTC if omitted
        """
        self.data_file = data_file or DEFAULT_DATA_FILE
        self.timezone = timezone or "UTC"
        self.calendar_events = self._load_calendar_data()

    def _load_calendar_data(self) -> List[Dict[str, Any]]:
        """Load mock calendar data from the JSON file."""
        if not self.data_file.exists():
            logger.warning("Mock calendar data %s not found, serving no events", self.data_file)
            return []

        with open(self.data_file, "r", encoding="utf-8") as f:
            return json.load(f)

    async def get_calendar_events(
        self,
        time_min: DateTime,
        time_max: DateTime,
        event_id: str = ""
    ) -> Dict[str, List[BusyInterval]]:
        """
        Return events overlapping ``[time_min, time_max]``, per account.

        ``event_id`` is accepted for interface compatibility and ignored.
        """
        busy_intervals: Dict[str, List[BusyInterval]] = {}

        for event in self.calendar_events:
            account = event.get("account", "mock@example.com_google")
            busy_intervals.setdefault(account, [])

            try:
                start = self._parse_datetime(event["startDate"])
                end = self._parse_datetime(event["endDate"])
            except (KeyError, ValueError) as e:
                logger.warning("Skipping invalid mock event %r: %s", event, e)
                continue

            if start < time_max and end > time_min:
                metadata = {
                    key: value for key, value in event.items()
                    if key not in ("account", "startDate", "endDate")
                }
                busy_intervals[account].append(
                    BusyInterval(start=start, end=end, metadata=metadata)
                )

        return busy_intervals

    def _parse_datetime(self, datetime_str: str) -> DateTime:
        dt = pendulum.parse(datetime_str)

        if isinstance(dt, DateTime):
            return dt.in_timezone(self.timezone)

        raise ValueError(f"Could not parse datetime: {datetime_str}")
