"""
Configuration for license loading.
"""

import logging
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LicenseSettings(BaseSettings):
    """License settings loaded from environment variables"""

    # Raw license key
    license: Optional[str] = None

    # Accept the literal "debug" key as an unlimited development license
    allow_debug_key: bool = False

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="ADLICENSE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @property
    def log_level_value(self) -> int:
        """Numeric logging level for ``logging.basicConfig``"""
        return getattr(logging, self.log_level)
