"""
Schedule source backed by timeline JSON files on disk.
"""

import json
import logging
from datetime import date
from pathlib import Path

from ..domain.exceptions import PayloadError, ScheduleSourceError
from ..domain.schedule import DaySchedule
from .timeline_payload import parse_timeline, to_day_schedule

logger = logging.getLogger(__name__)


class JsonScheduleSource:
    """
    Serves day schedules from saved timeline responses.

    ``path`` is either a single timeline file, or a directory holding one
    ``YYYY-MM-DD.json`` file per day.
    """

    def __init__(self, path: Path, timezone: str):
        self.path = path
        self.timezone = timezone

    def _file_for(self, day: date) -> Path:
        if self.path.is_dir():
            return self.path / f"{day.isoformat()}.json"
        return self.path

    def _read(self, file_path: Path) -> dict:
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError as exc:
            raise ScheduleSourceError(f"Timeline file not found: {file_path}") from exc
        except json.JSONDecodeError as exc:
            raise PayloadError(f"Invalid JSON in {file_path}: {exc}") from exc
        except OSError as exc:
            raise ScheduleSourceError(f"Could not read {file_path}: {exc}") from exc

    def get_day_schedule(self, day: date) -> DaySchedule:
        """
        Load the schedule for ``day``.

        Raises:
            ScheduleSourceError: If the file is missing or holds another day
            PayloadError: If the file content is not a valid timeline
        """
        file_path = self._file_for(day)
        payload = parse_timeline(self._read(file_path))

        if payload.day != day:
            raise ScheduleSourceError(
                f"{file_path} holds the timeline for {payload.day}, not {day}"
            )

        schedule = to_day_schedule(payload, self.timezone)
        logger.debug("Loaded %d professionals for %s from %s", len(schedule.professionals), day, file_path)

        return schedule
