from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping

from ..core.errors import NormalizationError
from ..domain.models import FieldValue, RawSensorEvent


class Normalizer(ABC):
    """Maps the state of one sensor family onto point tags and fields."""

    sensor_types: tuple[str, ...] = ()

    def tags(self, event: RawSensorEvent) -> dict[str, str]:
        return {
            "id": event.sensor_id,
            "name": event.sensor_name,
            "type": event.sensor_type,
        }

    @abstractmethod
    def fields(self, state: Mapping[str, Any]) -> dict[str, FieldValue]:
        """Return the measurements in *state*. Raise NormalizationError if incomplete."""
        ...

    def normalize(self, event: RawSensorEvent) -> tuple[dict[str, str], dict[str, FieldValue]]:
        return self.tags(event), self.fields(event.state)


def _coerce(key: str, value: Any, kind: type) -> FieldValue:
    if kind is bool:
        if not isinstance(value, bool):
            raise NormalizationError(f"state {key!r} is not a boolean: {value!r}")
        return value
    # bool is an int subclass; a flag where a number is expected is malformed
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise NormalizationError(f"state {key!r} is not numeric: {value!r}")
    return kind(value)


def require(state: Mapping[str, Any], key: str, kind: type) -> FieldValue:
    value = state.get(key)
    if value is None:
        raise NormalizationError(f"state is missing {key!r}")
    return _coerce(key, value, kind)


def optional(state: Mapping[str, Any], key: str, kind: type, into: dict[str, FieldValue]) -> None:
    value = state.get(key)
    if value is not None:
        into[key] = _coerce(key, value, kind)


class BooleanStateNormalizer(Normalizer):
    """Single boolean state key, e.g. presence or open."""

    state_key: str = ""

    def fields(self, state: Mapping[str, Any]) -> dict[str, FieldValue]:
        return {self.state_key: require(state, self.state_key, bool)}
