from __future__ import annotations

from typing import Any, Mapping

from .base import Normalizer, require
from ..domain.models import FieldValue


class TemperatureNormalizer(Normalizer):
    sensor_types = ("ZHATemperature", "CLIPTemperature")

    def fields(self, state: Mapping[str, Any]) -> dict[str, FieldValue]:
        # reported in hundredths of a degree Celsius
        return {"temperature": require(state, "temperature", float) / 100.0}


class HumidityNormalizer(Normalizer):
    sensor_types = ("ZHAHumidity", "CLIPHumidity")

    def fields(self, state: Mapping[str, Any]) -> dict[str, FieldValue]:
        # reported in hundredths of a percent
        return {"humidity": require(state, "humidity", float) / 100.0}


class PressureNormalizer(Normalizer):
    sensor_types = ("ZHAPressure", "CLIPPressure")

    def fields(self, state: Mapping[str, Any]) -> dict[str, FieldValue]:
        return {"pressure": require(state, "pressure", int)}
