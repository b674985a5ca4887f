from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional

from ..core.errors import NormalizationError
from ..core.timeutil import now_utc
from ..domain.interfaces import EventSource, PointWriter
from ..domain.models import RawSensorEvent, TimeSeriesPoint
from ..sensors.registry import NormalizerRegistry, default_registry


logger = logging.getLogger(__name__)


@dataclass
class ForwarderStats:
    received: int = 0
    forwarded: int = 0
    dropped: int = 0


class Forwarder:
    """Normalizes gateway events and hands the resulting points to the writer.

    The forwarder owns *writer*. Writes are fire-and-forget; batching,
    flushing and retries belong to the writer.
    """

    def __init__(
        self,
        events: EventSource,
        writer: PointWriter,
        registry: Optional[NormalizerRegistry] = None,
        prefix: str = "deflux",
    ) -> None:
        self._events = events
        self._writer = writer
        self._registry = registry or default_registry()
        self._prefix = prefix
        self.stats = ForwarderStats()

    def measurement(self, sensor_type: str) -> str:
        return f"{self._prefix}_{sensor_type}"

    def handle(self, event: RawSensorEvent) -> Optional[TimeSeriesPoint]:
        self.stats.received += 1
        try:
            tags, fields = self._registry.to_point_parts(event)
        except NormalizationError as e:
            self.stats.dropped += 1
            logger.warning("not adding event to influx batch: %s", e)
            return None

        # processing time, not the gateway's lastupdated
        point = TimeSeriesPoint(
            measurement=self.measurement(event.sensor_type),
            tags=tags,
            fields=fields,
            ts_utc=now_utc(),
        )
        self._writer.write(point)
        self.stats.forwarded += 1
        logger.debug("Queued %s %s %s", point.measurement, tags, fields)
        return point

    async def run(self) -> None:
        """Forward events until the source ends; its EventStreamClosed propagates."""
        logger.info("Forwarding loop started")
        async for event in self._events:
            self.handle(event)
        logger.info(
            "Forwarding loop stopped (received=%d forwarded=%d dropped=%d)",
            self.stats.received, self.stats.forwarded, self.stats.dropped,
        )
