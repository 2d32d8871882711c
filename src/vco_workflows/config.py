"""Connection settings for a vCenter Orchestrator server.

Settings are loaded from:
- environment variables
- a local `.env` file (if present)
- or, through `VcoSettings.from_file`, a JSON configuration file such as
  `~/.vcoworkflows/config.json`
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

API_PATH = "/vco/api"
DEFAULT_CONFIG_FILE = Path.home() / ".vcoworkflows" / "config.json"


class VcoSettings(BaseSettings):
    """Settings for talking to the vCO REST API.

    Environment variables:
    - VCO_URL
    - VCO_USER
    - VCO_PASSWD
    - VCO_VERIFY_SSL  (optional)
    - LOG_LEVEL       (optional)
    """

    url: str = Field(
        default="",
        validation_alias="VCO_URL",
        description="vCO server URL; '/vco/api' is appended when missing",
    )
    username: str = Field(
        default="",
        validation_alias="VCO_USER",
        description="User to authenticate as",
    )
    password: str = Field(
        default="",
        validation_alias="VCO_PASSWD",
        description="Password for the user",
    )
    verify_ssl: bool = Field(
        default=True,
        validation_alias="VCO_VERIFY_SSL",
        description="Verify the server's TLS certificate",
    )
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("url")
    @classmethod
    def _normalize_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if value and not value.endswith(API_PATH):
            value += API_PATH
        return value

    @model_validator(mode="after")
    def _require_credentials(self) -> VcoSettings:
        if not self.url:
            raise ValueError("VCO_URL is required")
        if not self.username.strip():
            raise ValueError("VCO_USER is required")
        if not self.password:
            raise ValueError("VCO_PASSWD is required")
        return self

    def __str__(self) -> str:
        return (
            f"url: {self.url}\n"
            f"username: {self.username}\n"
            f"password: {'********' if self.password else ''}\n"
            f"verify_ssl: {self.verify_ssl}"
        )

    @classmethod
    def from_file(cls, path: Path | None = None, **overrides: Any) -> VcoSettings:
        """Load settings from a JSON config file.

        Keys: ``url``, ``username``, ``password``, ``verify_ssl``. Values in
        ``overrides`` win over the file.
        """

        config_path = path or DEFAULT_CONFIG_FILE
        data = json.loads(config_path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a JSON object: {config_path}")

        values = {
            key: data[key]
            for key in ("url", "username", "password", "verify_ssl")
            if data.get(key) is not None
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
