from __future__ import annotations

from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DEFLUX_", env_file=".env", extra="ignore")

    # Operator configuration lookup: <cwd>/<config_filename>, then <system_config_dir>/<config_filename>
    config_filename: str = "deflux.yml"
    system_config_dir: str = "/etc"

    # Measurement name is "<measurement_prefix>_<sensor type>"
    measurement_prefix: str = "deflux"

    # Gateway bootstrap
    discovery_url: str = "https://phoscon.de/discover"
    device_type: str = "deflux"
    http_timeout: float = 10.0

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = Field(default=None)


settings = Settings()


class _Section(BaseModel):
    """Config section whose file keys match case-insensitively."""

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra="ignore",
        # YAML reads unquoted keys such as APIKey: 1234567890 as numbers
        coerce_numbers_to_str=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _canonical_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        canonical = {}
        for name, field in cls.model_fields.items():
            key = field.alias or name
            canonical[key.lower()] = key
        return {canonical.get(str(k).lower(), k): v for k, v in data.items()}


class DeconzConfig(_Section):
    addr: str = Field(alias="Addr")
    api_key: str = Field(alias="APIKey")


class Influxdb2Config(_Section):
    url: str = Field(alias="URL")
    org: str = Field(alias="Org")
    token: str = Field(alias="Token")
    bucket: str = Field(alias="Bucket")
    batch_size: int = Field(default=20, alias="BatchSize", ge=0)


class Configuration(_Section):
    deconz: DeconzConfig = Field(alias="Deconz")
    influxdb2: Influxdb2Config = Field(alias="Influxdb2")

    @classmethod
    def from_yaml(cls, text: str) -> "Configuration":
        data = yaml.safe_load(text)
        if not isinstance(data, dict):
            raise ValueError("configuration must be a mapping with Deconz and Influxdb2 sections")
        return cls.model_validate(data)

    def to_yaml(self) -> str:
        return yaml.safe_dump(
            self.model_dump(by_alias=True),
            sort_keys=False,
            default_flow_style=False,
        )
