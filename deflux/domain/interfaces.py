from __future__ import annotations
from typing import AsyncIterator, Protocol, runtime_checkable
from .models import RawSensorEvent, TimeSeriesPoint


@runtime_checkable
class EventSource(Protocol):
    def __aiter__(self) -> AsyncIterator[RawSensorEvent]:
        ...

    async def aclose(self) -> None:
        ...


@runtime_checkable
class PointWriter(Protocol):
    def write(self, point: TimeSeriesPoint) -> None:
        """Enqueue a point; must not wait for the batch to be flushed."""
        ...

    def close(self) -> None:
        ...
