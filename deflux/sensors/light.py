from __future__ import annotations

from typing import Any, Mapping

from .base import Normalizer, optional, require
from ..domain.models import FieldValue


class LightLevelNormalizer(Normalizer):
    sensor_types = ("ZHALightLevel", "CLIPLightLevel")

    def fields(self, state: Mapping[str, Any]) -> dict[str, FieldValue]:
        out: dict[str, FieldValue] = {"lightlevel": require(state, "lightlevel", int)}
        optional(state, "lux", int, out)
        optional(state, "dark", bool, out)
        optional(state, "daylight", bool, out)
        return out


class DaylightNormalizer(Normalizer):
    sensor_types = ("Daylight",)

    def fields(self, state: Mapping[str, Any]) -> dict[str, FieldValue]:
        out: dict[str, FieldValue] = {"daylight": require(state, "daylight", bool)}
        optional(state, "status", int, out)
        return out
