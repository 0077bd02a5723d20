"""
Shared fixtures.
"""

import json
from pathlib import Path

import pytest

from barberslots.domain.models import WorkingHours


@pytest.fixture
def morning_hours() -> WorkingHours:
    """09:00-12:00 with a 10:00-10:30 break, on a Monday."""
    return WorkingHours(
        day_of_week=1,
        open_time="09:00",
        close_time="12:00",
        break_start="10:00",
        break_end="10:30",
    )


FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def timeline_file() -> Path:
    """Saved timeline of Monday 2024-11-25 with two professionals."""
    return FIXTURES / "2024-11-25.json"


@pytest.fixture
def timeline_data(timeline_file) -> dict:
    with open(timeline_file, "r", encoding="utf-8") as f:
        return json.load(f)
