"""
Tests for YAML configuration loading.
"""

import pytest
from pydantic import ValidationError

from barberslots.config import AppConfig, DefaultsConfig


def _write(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestAppConfig:
    """Tests for AppConfig."""

    def test_defaults(self):
        config = AppConfig()

        assert config.timezone == "America/Sao_Paulo"
        assert config.defaults.slot_duration_minutes == 30
        assert config.api is None
        assert config.weekly_hours() == []

    def test_load_from_yaml(self, tmp_path):
        path = _write(tmp_path, """
timezone: "Europe/Lisbon"
business_id: 4
log_level: debug
defaults:
  slot_duration_minutes: 15
api:
  base_url: "https://api.example.com/"
working_hours:
  - {day_of_week: 0, closed: true}
  - {day_of_week: 1, open_time: "09:00", close_time: "18:00", break_start: "12:00", break_end: "13:00"}
""")

        config = AppConfig.load_from_yaml(path)

        assert config.timezone == "Europe/Lisbon"
        assert config.log_level == "DEBUG"
        assert config.defaults.slot_duration_minutes == 15
        assert config.defaults.service_duration_minutes == 30
        assert config.api.base_url == "https://api.example.com"
        monday = config.weekly_hours()[1]
        assert monday.bounds().break_start == 720

    def test_unquoted_yaml_times(self, tmp_path):
        """YAML reads 10:30 as a base-60 integer; it still means 10:30."""
        path = _write(tmp_path, """
working_hours:
  - {day_of_week: 1, open_time: 09:00, close_time: 18:30}
""")

        hours = AppConfig.load_from_yaml(path).weekly_hours()[0]

        assert hours.open_time == "09:00"
        assert hours.close_time == "18:30"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "nope.yaml")

    def test_root_must_be_mapping(self, tmp_path):
        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(_write(tmp_path, "- 1\n- 2\n"))

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(_write(tmp_path, "timezone: [unclosed\n"))

    def test_empty_file_gives_defaults(self, tmp_path):
        assert AppConfig.load_from_yaml(_write(tmp_path, "")) == AppConfig()

    @pytest.mark.parametrize(
        "fields",
        [
            {"timezone": "Mars/Olympus_Mons"},
            {"log_level": "LOUD"},
            {"api": {"base_url": "ftp://example.com"}},
            {"api": {"base_url": "https://example.com", "timeout_seconds": 0}},
            {"working_hours": [{"day_of_week": 1}, {"day_of_week": 1}]},
            {"working_hours": [{"day_of_week": 7}]},
            {"working_hours": [{"day_of_week": 1, "open_time": "nine"}]},
        ],
    )
    def test_invalid_values(self, fields):
        with pytest.raises(ValidationError):
            AppConfig(**fields)

    def test_load_or_default_without_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("barberslots.config.get_default_config_path", lambda: tmp_path / "config.yaml")

        assert AppConfig.load_or_default(None) == AppConfig()


class TestDefaultsConfig:
    """Tests for DefaultsConfig validation."""

    def test_service_duration_minimum(self):
        with pytest.raises(ValidationError):
            DefaultsConfig(service_duration_minutes=4)

        assert DefaultsConfig(service_duration_minutes=5).service_duration_minutes == 5

    @pytest.mark.parametrize("field", ["slot_duration_minutes", "booking_horizon_days"])
    def test_positive(self, field):
        with pytest.raises(ValidationError):
            DefaultsConfig(**{field: 0})
