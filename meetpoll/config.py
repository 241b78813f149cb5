"""
Configuration management using Pydantic models loaded from YAML.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import pendulum
import yaml
from pendulum import Duration
from pydantic import BaseModel, Field, field_validator, model_validator

ADMIN_PASSWORD_ENV = "MEETPOLL_ADMIN_PASSWORD"


class LimitsConfig(BaseModel):
    """Field length rules for submitted data."""
    code_max_length: int = 32
    password_min_length: int = 8
    password_max_length: int = 32
    name_max_length: int = 64
    note_max_length: int = 500

    @field_validator("*")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure every limit is positive."""
        if value <= 0:
            raise ValueError(f"Limits must be greater than zero, got {value}")
        return value

    @model_validator(mode="after")
    def validate_password_bounds(self) -> "LimitsConfig":
        """Ensure the password window is not empty."""
        if self.password_max_length < self.password_min_length:
            raise ValueError("password_max_length must not be below password_min_length")
        return self


class AppConfig(BaseModel):
    """Application configuration."""
    data_file: Path = Path("data.json")
    timezone: str = "UTC"
    session_ttl_minutes: int = 60
    bcrypt_rounds: int = 10
    admin_password: Optional[str] = None
    log_level: str = "WARNING"
    limits: LimitsConfig = Field(default_factory=LimitsConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone name is known."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("session_ttl_minutes")
    @classmethod
    def validate_session_ttl(cls, value: int) -> int:
        """Ensure sessions last a positive amount of time."""
        if value <= 0:
            raise ValueError("session_ttl_minutes must be greater than zero")
        return value

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_bcrypt_rounds(cls, value: int) -> int:
        """bcrypt accepts cost factors between 4 and 31."""
        if not 4 <= value <= 31:
            raise ValueError(f"bcrypt_rounds must be between 4 and 31, got {value}")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Normalise and check the logging level name."""
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @model_validator(mode="after")
    def apply_environment(self) -> "AppConfig":
        """Let the environment supply the admin password."""
        env_password = os.getenv(ADMIN_PASSWORD_ENV)
        if env_password:
            self.admin_password = env_password
        return self

    def session_ttl(self) -> Duration:
        """Get the session lifetime as a duration."""
        return pendulum.duration(minutes=self.session_ttl_minutes)

    def resolve_data_file(self, base_dir: Path) -> Path:
        """Resolve a relative ``data_file`` against ``base_dir``."""
        if self.data_file.is_absolute():
            return self.data_file
        return base_dir / self.data_file

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
