"""
Tests for configuration loading.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from docslots.config import AppConfig, SchedulerConfig


class TestAppConfig:
    """Tests for AppConfig."""

    def test_defaults(self):
        config = AppConfig()

        assert config.timezone == "America/Guayaquil"
        assert config.scheduler.interval_minutes == 30
        assert config.scheduler.months_ahead == 3
        assert config.api.base_url == ""
        assert config.auth.use_keyring is True

    def test_load_from_yaml_resolves_relative_paths(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            "timezone: Europe/Madrid\n"
            "scheduler:\n"
            "  interval_minutes: 20\n"
            "data:\n"
            "  doctors_file: data/doctors.json\n"
            "  appointments_file: /var/lib/docslots/appointments.json\n",
            encoding="utf-8",
        )

        config = AppConfig.load_from_yaml(config_path)

        assert config.timezone == "Europe/Madrid"
        assert config.scheduler.interval_minutes == 20
        assert config.data.doctors_file == tmp_path / "data" / "doctors.json"
        assert config.data.ratings_file == tmp_path / "data" / "ratings.json"
        assert config.data.appointments_file == Path("/var/lib/docslots/appointments.json")

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "nope.yaml")

    def test_invalid_yaml_raises_value_error(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("scheduler: [unclosed\n", encoding="utf-8")

        with pytest.raises(ValueError):
            AppConfig.load_from_yaml(config_path)

    def test_non_mapping_root_is_rejected(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("- just\n- a list\n", encoding="utf-8")

        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(config_path)

    def test_unknown_timezone_is_rejected(self):
        with pytest.raises(ValidationError):
            AppConfig(timezone="Mars/Olympus_Mons")


class TestSchedulerConfig:
    """Tests for SchedulerConfig validation."""

    @pytest.mark.parametrize("interval", [0, -15, 1441])
    def test_interval_out_of_range(self, interval):
        with pytest.raises(ValidationError):
            SchedulerConfig(interval_minutes=interval)

    def test_negative_months_ahead(self):
        with pytest.raises(ValidationError):
            SchedulerConfig(months_ahead=-1)
