"""
Adapters that turn fetched timeline data into domain schedules.
"""

from .http_schedule_source import HttpScheduleSource
from .json_schedule_source import JsonScheduleSource
from .timeline_payload import TimelinePayload, parse_timeline, to_day_schedule

__all__ = [
    "HttpScheduleSource",
    "JsonScheduleSource",
    "TimelinePayload",
    "parse_timeline",
    "to_day_schedule",
]
