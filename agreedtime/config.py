"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


class GridDefaults(BaseModel):
    """Default grid settings for a new event."""
    slot_duration: int = 60
    start_hour: int = 9
    end_hour: int = 18
    max_weeks: int = 8
    default_weeks: int = 4

    @field_validator("slot_duration")
    @classmethod
    def validate_slot_duration(cls, value: int) -> int:
        """Ensure slot duration fits in a day."""
        if not 0 < value <= 24 * 60:
            raise ValueError(f"slot_duration must be between 1 and 1440 minutes, got {value}")
        return value

    @field_validator("start_hour", "end_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 24."""
        if not 0 <= v <= 24:
            raise ValueError(f"Hour must be between 0 and 24, got {v}")
        return v

    @field_validator("max_weeks", "default_weeks")
    @classmethod
    def validate_weeks(cls, value: int) -> int:
        if value < 1:
            raise ValueError(f"Week counts must be at least 1, got {value}")
        return value

    @model_validator(mode="after")
    def validate_hours_order(self) -> "GridDefaults":
        """Ensure the configured window opens before it closes."""
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be later than start_hour")
        if self.default_weeks > self.max_weeks:
            raise ValueError("default_weeks cannot exceed max_weeks")
        return self


class GestureSettings(BaseModel):
    """Touch gesture tuning."""
    long_press_ms: int = 500
    move_threshold_px: float = 10.0
    haptic_ms: int = 50

    @field_validator("long_press_ms", "haptic_ms")
    @classmethod
    def validate_non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError(f"Durations cannot be negative, got {value}")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    api_base_url: str = "http://localhost:3000"
    timezone: str = "local"
    request_timeout: float = 10.0
    other_options_limit: int = 10
    grid: GridDefaults = Field(default_factory=GridDefaults)
    gesture: GestureSettings = Field(default_factory=GestureSettings)

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

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

        return cls(**data)

    @classmethod
    def load_or_default(cls, config_path: Path | None = None) -> "AppConfig":
        """Load the config file if there is one, otherwise use defaults."""
        path = config_path or get_default_config_path()
        if config_path is None and not path.exists():
            return cls()
        return cls.load_from_yaml(path)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
