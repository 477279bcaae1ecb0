"""
Configuration settings for the dcTrack client.

Uses Pydantic Settings to load `DCTRACK_*` environment variables (and a local
`.env`) for the service connection, retry policy, and logging. A YAML file in
the classic client format can be loaded with `Settings.from_yaml`.
"""
from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dctrack.domain.filters import FieldSet
from dctrack.domain.models import Credentials
from dctrack.errors import ConfigurationError

DEFAULT_PAGE_SIZE = 1000
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 1.0

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ns|us|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: Union[str, int, float]) -> float:
    """
    Convert a duration to seconds.

    Accepts plain numbers (seconds) and unit strings such as ``"500ms"``,
    ``"2s"``, ``"1m"`` or ``"1m30s"``.
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)

    text = value.strip().lower()
    try:
        return float(text)
    except ValueError:
        pass

    position = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()
    if position == 0 or position != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return total


class Settings(BaseSettings):
    # Connection
    url: str = Field("", alias="DCTRACK_URL")
    username: str = Field("", alias="DCTRACK_USERNAME")
    password: SecretStr = Field(SecretStr(""), alias="DCTRACK_PASSWORD")
    password_file: Optional[Path] = Field(None, alias="DCTRACK_PASSWORD_FILE")

    # Fetch behaviour
    page_size: int = Field(DEFAULT_PAGE_SIZE, alias="DCTRACK_PAGE_SIZE")
    max_retries: int = Field(DEFAULT_MAX_RETRIES, alias="DCTRACK_MAX_RETRIES")
    retry_delay: float = Field(DEFAULT_RETRY_DELAY, alias="DCTRACK_RETRY_DELAY")
    timeout: float = Field(30.0, gt=0, alias="DCTRACK_TIMEOUT")
    verify_ssl: bool = Field(True, alias="DCTRACK_VERIFY_SSL")
    field_set: FieldSet = Field(FieldSet.NONE, alias="DCTRACK_FIELD_SET")
    strict_validation: bool = Field(False, alias="DCTRACK_STRICT_VALIDATION")

    # Application
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    json_logs: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("page_size")
    @classmethod
    def _default_page_size(cls, value: int) -> int:
        return value if value > 0 else DEFAULT_PAGE_SIZE

    @field_validator("max_retries")
    @classmethod
    def _default_max_retries(cls, value: int) -> int:
        return value if value > 0 else DEFAULT_MAX_RETRIES

    @field_validator("retry_delay", mode="before")
    @classmethod
    def _parse_retry_delay(cls, value: Any) -> float:
        seconds = parse_duration(value)
        return seconds if seconds > 0 else DEFAULT_RETRY_DELAY

    @field_validator("field_set", mode="before")
    @classmethod
    def _normalize_field_set(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def base_url(self) -> str:
        return self.url.rstrip("/")

    def resolve_password(self) -> str:
        """
        Return the password, reading `password_file` when no inline value is set.

        Raises
        ------
        ConfigurationError
            If the password file cannot be read.
        """
        inline = self.password.get_secret_value()
        if inline or self.password_file is None:
            return inline
        try:
            return self.password_file.read_text(encoding="utf-8").rstrip("\r\n")
        except OSError as exc:
            raise ConfigurationError(
                f"cannot read password file {self.password_file}: {exc}"
            ) from exc

    def credentials(self) -> Credentials:
        """
        Validate the connection fields and build Credentials.

        Raises
        ------
        ConfigurationError
            If URL, username or password is missing.
        """
        if not self.url:
            raise ConfigurationError("DCTRACK_URL is required")
        if not self.username:
            raise ConfigurationError("DCTRACK_USERNAME is required")
        password = self.resolve_password()
        if not password:
            raise ConfigurationError("DCTRACK_PASSWORD or DCTRACK_PASSWORD_FILE is required")
        return Credentials(username=self.username, password=password)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "Settings":
        """
        Load settings from a YAML file.

        Keys use the field names (``url``, ``page_size``, ``retry_delay: 2s``,
        ...). The legacy ``request_all_fields`` flag selects the full or
        minimal column set.
        """
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigurationError(f"config file not found: {config_path}")
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"config file {config_path} must contain a mapping")

        if "request_all_fields" in data and "field_set" not in data:
            data["field_set"] = FieldSet.FULL if data.pop("request_all_fields") else FieldSet.MINIMAL
        try:
            return cls(**data)
        except ValidationError as exc:
            raise ConfigurationError(f"invalid configuration in {config_path}: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings", "parse_duration"]
