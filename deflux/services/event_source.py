from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterable, Awaitable, Callable, Optional, Union

import websockets
from websockets.exceptions import WebSocketException

from ..core.config import DeconzConfig, Settings, settings
from ..core.errors import EventStreamClosed, GatewayConnectionError, GatewayError
from ..domain.models import RawSensorEvent
from ..drivers.deconz_api import DeconzAPI
from ..drivers.deconz_events import SensorCache, SensorEventDecoder

logger = logging.getLogger(__name__)

Message = Union[str, bytes]


@dataclass(frozen=True)
class _Closed:
    cause: Optional[BaseException]


class EventStream:
    """Unbounded, non-restartable stream of raw sensor events.

    A producer task reads gateway messages and hands each decoded event to
    the consumer through a queue of capacity 1, so reading pauses while the
    consumer is busy. When the connection ends the iterator raises
    EventStreamClosed.
    """

    def __init__(
        self,
        messages: AsyncIterable[Message],
        decoder: SensorEventDecoder,
        closer: Optional[Callable[[], Awaitable[None]]] = None,
    ) -> None:
        self._messages = messages
        self._decoder = decoder
        self._closer = closer
        self._queue: asyncio.Queue[Union[RawSensorEvent, _Closed]] = asyncio.Queue(maxsize=1)
        self._task: Optional[asyncio.Task] = None
        self._closed: Optional[EventStreamClosed] = None

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._produce(), name="deconz_event_reader")

    async def _produce(self) -> None:
        cause: Optional[BaseException] = None
        try:
            async for message in self._messages:
                event = await self._decoder.decode(message)
                if event is not None:
                    await self._queue.put(event)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            cause = e
        await self._queue.put(_Closed(cause))

    def __aiter__(self) -> "EventStream":
        return self

    async def __anext__(self) -> RawSensorEvent:
        if self._closed is not None:
            raise self._closed
        self.start()
        item = await self._queue.get()
        if isinstance(item, _Closed):
            reason = f"deCONZ event connection lost: {item.cause}" if item.cause else "deCONZ event connection closed"
            self._closed = EventStreamClosed(reason)
            self._closed.__cause__ = item.cause
            raise self._closed
        return item

    async def aclose(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        if self._closer is not None:
            closer, self._closer = self._closer, None
            await closer()


async def open_event_stream(
    config: DeconzConfig,
    cfg: Settings = settings,
    connect: Callable[[str], Awaitable[Any]] = websockets.connect,
) -> EventStream:
    """Open a gateway session and its websocket; raise GatewayConnectionError on failure."""
    api = DeconzAPI(config.addr, config.api_key, timeout=cfg.http_timeout)
    try:
        sensors = await api.sensors()
        ws_url = await api.websocket_url()
        connection = await connect(ws_url)
    except (GatewayError, OSError, asyncio.TimeoutError, WebSocketException) as e:
        await api.aclose()
        raise GatewayConnectionError(f"unable to connect to deCONZ at {api.addr}: {e}") from e

    async def close() -> None:
        try:
            await connection.close()
        finally:
            await api.aclose()

    cache = SensorCache(api.sensors, sensors)
    stream = EventStream(connection, SensorEventDecoder(cache), closer=close)
    stream.start()
    logger.info("Connected to deCONZ at %s (%d sensors, events from %s)", api.addr, len(cache), ws_url)
    return stream
