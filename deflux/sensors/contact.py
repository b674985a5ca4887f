from __future__ import annotations

from typing import Any, Mapping

from .base import BooleanStateNormalizer, optional
from ..domain.models import FieldValue


class PresenceNormalizer(BooleanStateNormalizer):
    sensor_types = ("ZHAPresence", "CLIPPresence")
    state_key = "presence"


class OpenCloseNormalizer(BooleanStateNormalizer):
    sensor_types = ("ZHAOpenClose", "CLIPOpenClose")
    state_key = "open"


class WaterNormalizer(BooleanStateNormalizer):
    sensor_types = ("ZHAWater",)
    state_key = "water"


class FireNormalizer(BooleanStateNormalizer):
    sensor_types = ("ZHAFire",)
    state_key = "fire"


class CarbonMonoxideNormalizer(BooleanStateNormalizer):
    sensor_types = ("ZHACarbonMonoxide",)
    state_key = "carbonmonoxide"


class AlarmNormalizer(BooleanStateNormalizer):
    sensor_types = ("ZHAAlarm",)
    state_key = "alarm"


class VibrationNormalizer(BooleanStateNormalizer):
    sensor_types = ("ZHAVibration",)
    state_key = "vibration"

    def fields(self, state: Mapping[str, Any]) -> dict[str, FieldValue]:
        out = super().fields(state)
        optional(state, "tiltangle", int, out)
        optional(state, "vibrationstrength", int, out)
        return out
