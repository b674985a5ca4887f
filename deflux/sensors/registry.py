from __future__ import annotations

from typing import Iterable

from .base import Normalizer
from .climate import HumidityNormalizer, PressureNormalizer, TemperatureNormalizer
from .contact import (
    AlarmNormalizer,
    CarbonMonoxideNormalizer,
    FireNormalizer,
    OpenCloseNormalizer,
    PresenceNormalizer,
    VibrationNormalizer,
    WaterNormalizer,
)
from .light import DaylightNormalizer, LightLevelNormalizer
from .power import ConsumptionNormalizer, PowerNormalizer
from .switch import SwitchNormalizer
from ..core.errors import NormalizationError
from ..domain.models import FieldValue, RawSensorEvent


BUILTIN_NORMALIZERS: tuple[type[Normalizer], ...] = (
    TemperatureNormalizer,
    HumidityNormalizer,
    PressureNormalizer,
    SwitchNormalizer,
    PresenceNormalizer,
    OpenCloseNormalizer,
    WaterNormalizer,
    FireNormalizer,
    CarbonMonoxideNormalizer,
    AlarmNormalizer,
    VibrationNormalizer,
    LightLevelNormalizer,
    DaylightNormalizer,
    PowerNormalizer,
    ConsumptionNormalizer,
)


class NormalizerRegistry:
    def __init__(self, normalizers: Iterable[Normalizer] = ()) -> None:
        self._by_type: dict[str, Normalizer] = {}
        for n in normalizers:
            self.register(n)

    def register(self, normalizer: Normalizer, *sensor_types: str) -> None:
        """Register *normalizer* for *sensor_types*, or its own ``sensor_types`` if none given."""
        for t in sensor_types or normalizer.sensor_types:
            self._by_type[t] = normalizer

    def get(self, sensor_type: str) -> Normalizer | None:
        return self._by_type.get(sensor_type)

    def sensor_types(self) -> list[str]:
        return sorted(self._by_type)

    def to_point_parts(self, event: RawSensorEvent) -> tuple[dict[str, str], dict[str, FieldValue]]:
        normalizer = self.get(event.sensor_type)
        if normalizer is None:
            raise NormalizationError(
                f"unsupported sensor type {event.sensor_type!r} (sensor {event.sensor_id})"
            )
        try:
            return normalizer.normalize(event)
        except NormalizationError as e:
            raise NormalizationError(
                f"{event.sensor_type} sensor {event.sensor_id}: {e}"
            ) from e


def default_registry() -> NormalizerRegistry:
    return NormalizerRegistry(cls() for cls in BUILTIN_NORMALIZERS)
