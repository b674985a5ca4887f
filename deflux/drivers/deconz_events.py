from __future__ import annotations

import json
import logging
from typing import Awaitable, Callable, Optional, Union

from ..core.errors import GatewayError
from ..domain.models import RawSensorEvent, SensorInfo

logger = logging.getLogger(__name__)

SensorFetch = Callable[[], Awaitable[dict[str, SensorInfo]]]


class SensorCache:
    """Sensor metadata by id, refreshed from the gateway when an id is unknown."""

    def __init__(self, fetch: SensorFetch, sensors: Optional[dict[str, SensorInfo]] = None) -> None:
        self._fetch = fetch
        self._sensors: dict[str, SensorInfo] = dict(sensors or {})

    def __len__(self) -> int:
        return len(self._sensors)

    async def refresh(self) -> None:
        self._sensors = await self._fetch()
        logger.debug("Sensor cache refreshed: %d sensor(s)", len(self._sensors))

    async def lookup(self, sensor_id: str) -> Optional[SensorInfo]:
        info = self._sensors.get(sensor_id)
        if info is not None:
            return info
        try:
            await self.refresh()
        except GatewayError as e:
            logger.warning("Refreshing sensors for unknown id %s failed: %s", sensor_id, e)
            return None
        return self._sensors.get(sensor_id)


class SensorEventDecoder:
    """Turns deCONZ websocket messages into raw sensor events.

    Only ``changed`` events on ``sensors`` resources carrying a ``state``
    object produce an event; everything else decodes to None.
    """

    def __init__(self, cache: SensorCache) -> None:
        self._cache = cache

    async def decode(self, message: Union[str, bytes]) -> Optional[RawSensorEvent]:
        try:
            msg = json.loads(message)
        except ValueError:
            logger.warning("Undecodable gateway message: %.200r", message)
            return None

        if not isinstance(msg, dict):
            return None
        if msg.get("t") != "event" or msg.get("e") != "changed" or msg.get("r") != "sensors":
            return None

        state = msg.get("state")
        if not isinstance(state, dict):
            # config or attribute change, e.g. battery level
            return None

        sensor_id = str(msg.get("id", ""))
        info = await self._cache.lookup(sensor_id)
        if info is None:
            logger.warning("Skipping event for unknown sensor %s", sensor_id)
            return None

        return RawSensorEvent(
            sensor_id=sensor_id,
            sensor_type=info.type,
            sensor_name=info.name,
            state=state,
        )
