"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator


class SchedulerConfig(BaseModel):
    """Slot settings for the booking scheduler."""
    interval_minutes: int = 30
    months_ahead: int = 3

    @field_validator("interval_minutes")
    @classmethod
    def validate_interval(cls, value: int) -> int:
        """Ensure the slot interval is positive and fits in a day."""
        if not 0 < value <= 24 * 60:
            raise ValueError(f"interval_minutes must be between 1 and 1440, got {value}")
        return value

    @field_validator("months_ahead")
    @classmethod
    def validate_months_ahead(cls, value: int) -> int:
        if value < 0:
            raise ValueError("months_ahead must not be negative")
        return value


class DataConfig(BaseModel):
    """Location of the file-backed stores."""
    doctors_file: Path = Path("data/doctors.json")
    appointments_file: Path = Path("data/appointments.json")
    ratings_file: Path = Path("data/ratings.json")


class ApiConfig(BaseModel):
    """Remote appointments API. When base_url is empty the JSON store is used."""
    base_url: str = ""
    token: str = ""
    timeout_seconds: int = 30


class AuthConfig(BaseModel):
    """Session and login redirect settings."""
    login_url: str = "/login"
    session_file: Optional[Path] = None
    use_keyring: bool = True


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "America/Guayaquil"
    locale: str = "es"
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    data: DataConfig = Field(default_factory=DataConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA identifier."""
        try:
            pendulum.timezone(value)
        except (ValueError, KeyError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    def resolve_paths(self, base_dir: Path) -> "AppConfig":
        """Make relative data paths relative to ``base_dir`` (the config file's folder)."""
        data = self.data.model_copy(
            update={
                "doctors_file": _resolve(base_dir, self.data.doctors_file),
                "appointments_file": _resolve(base_dir, self.data.appointments_file),
                "ratings_file": _resolve(base_dir, self.data.ratings_file),
            }
        )
        return self.model_copy(update={"data": data})

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data).resolve_paths(config_path.parent)


def _resolve(base_dir: Path, path: Path) -> Path:
    return path if path.is_absolute() else base_dir / path


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of docslots/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
