from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Union

FieldValue = Union[float, int, bool]


@dataclass(frozen=True)
class SensorInfo:
    id: str
    name: str
    type: str


@dataclass(frozen=True)
class RawSensorEvent:
    sensor_id: str
    sensor_type: str
    sensor_name: str
    state: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TimeSeriesPoint:
    measurement: str
    tags: dict[str, str]
    fields: dict[str, FieldValue]
    ts_utc: datetime

    def __post_init__(self) -> None:
        if not self.measurement:
            raise ValueError("measurement name must not be empty")


@dataclass(frozen=True)
class DiscoveredGateway:
    id: str
    name: str
    internal_ip: str
    internal_port: int
    mac: str = ""

    @property
    def api_url(self) -> str:
        return f"http://{self.internal_ip}:{self.internal_port}/api"
