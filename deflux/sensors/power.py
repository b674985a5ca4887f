from __future__ import annotations

from typing import Any, Mapping

from .base import Normalizer, optional, require
from ..core.errors import NormalizationError
from ..domain.models import FieldValue


class PowerNormalizer(Normalizer):
    sensor_types = ("ZHAPower",)

    def fields(self, state: Mapping[str, Any]) -> dict[str, FieldValue]:
        out: dict[str, FieldValue] = {}
        for key in ("power", "voltage", "current"):
            optional(state, key, int, out)
        if not out:
            raise NormalizationError("state has none of 'power', 'voltage', 'current'")
        return out


class ConsumptionNormalizer(Normalizer):
    sensor_types = ("ZHAConsumption",)

    def fields(self, state: Mapping[str, Any]) -> dict[str, FieldValue]:
        out: dict[str, FieldValue] = {"consumption": require(state, "consumption", int)}
        optional(state, "power", int, out)
        return out
