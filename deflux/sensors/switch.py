from __future__ import annotations

from typing import Any, Mapping

from .base import Normalizer, require
from ..domain.models import FieldValue


class SwitchNormalizer(Normalizer):
    sensor_types = ("ZHASwitch", "ZGPSwitch", "CLIPSwitch")

    def fields(self, state: Mapping[str, Any]) -> dict[str, FieldValue]:
        return {"buttonevent": require(state, "buttonevent", int)}
