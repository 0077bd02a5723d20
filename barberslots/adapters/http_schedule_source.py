"""
Booking backend client for fetching the appointment timeline.
"""

import logging
from datetime import date
from typing import Any, Dict, Optional, Sequence

import requests

from ..domain.exceptions import PayloadError, ScheduleSourceError
from ..domain.schedule import DaySchedule
from .timeline_payload import parse_timeline, to_day_schedule

logger = logging.getLogger(__name__)


class HttpScheduleSource:
    """
    Client for the backend's timeline endpoint.

    Uses ``GET /appointments/{businessId}/timeline`` which returns every
    professional of the business with working hours and appointments for
    one date.
    """

    def __init__(
        self,
        base_url: str,
        business_id: int,
        timezone: str,
        token: Optional[str] = None,
        timeout_seconds: float = 30,
        professional_ids: Optional[Sequence[int]] = None,
    ):
        """
        Initialize the timeline client.

        Args:
            base_url: Backend root URL, e.g. https://api.example.com
            business_id: Business whose timeline is fetched
            timezone: IANA timezone the working hours are expressed in
            token: Optional bearer token
            timeout_seconds: Request timeout
            professional_ids: Restrict the timeline to these professionals
        """
        self.base_url = base_url.rstrip("/")
        self.business_id = business_id
        self.timezone = timezone
        self.timeout_seconds = timeout_seconds
        self.professional_ids = list(professional_ids or [])
        self.headers = {"Accept": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    def _params(self, day: date) -> Dict[str, str]:
        params = {"date": day.isoformat()}
        if self.professional_ids:
            params["barberIds"] = ",".join(str(pid) for pid in self.professional_ids)
        return params

    def get_day_schedule(self, day: date) -> DaySchedule:
        """
        Fetch and validate the timeline for ``day``.

        Raises:
            ScheduleSourceError: If the API call fails
            PayloadError: If the response is not a valid timeline
        """
        url = f"{self.base_url}/appointments/{self.business_id}/timeline"

        try:
            response = requests.get(
                url,
                headers=self.headers,
                params=self._params(day),
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise ScheduleSourceError(f"Failed to fetch timeline for {day}: {e}") from e

        try:
            data: Any = response.json()
        except ValueError as e:
            raise PayloadError(f"Timeline response for {day} is not JSON: {e}") from e

        logger.debug("Fetched timeline for business %s on %s", self.business_id, day)
        return to_day_schedule(parse_timeline(data), self.timezone)
