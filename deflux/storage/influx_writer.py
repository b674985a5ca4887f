from __future__ import annotations

import logging
from typing import Any, Optional

from influxdb_client import InfluxDBClient, Point, WriteOptions, WritePrecision

from ..core.config import Influxdb2Config
from ..domain.models import TimeSeriesPoint

logger = logging.getLogger(__name__)


def to_influx_point(p: TimeSeriesPoint) -> Point:
    point = Point(p.measurement)
    for key, value in p.tags.items():
        point = point.tag(key, value)
    for key, value in p.fields.items():
        point = point.field(key, value)
    return point.time(p.ts_utc, WritePrecision.NS)


class WriteCallbacks:
    """Counts and logs batch outcomes reported by the influxdb-client scheduler."""

    def __init__(self) -> None:
        self.batches = 0
        self.errors = 0
        self.retries = 0

    def success(self, conf: Any, data: Any) -> None:
        self.batches += 1
        logger.debug("Batch written to %s (%d bytes)", conf, len(data))

    def error(self, conf: Any, data: Any, exception: Exception) -> None:
        self.errors += 1
        logger.error("Batch write to %s failed (%d bytes): %s", conf, len(data), exception)

    def retry(self, conf: Any, data: Any, exception: Exception) -> None:
        self.retries += 1
        logger.warning("Batch write to %s will be retried (%d bytes): %s", conf, len(data), exception)


class InfluxPointWriter:
    """Batching InfluxDB 2 writer; ``write`` only enqueues."""

    def __init__(self, config: Influxdb2Config, client: Optional[InfluxDBClient] = None) -> None:
        self._bucket = config.bucket
        self._org = config.org
        self._client = client or InfluxDBClient(url=config.url, token=config.token, org=config.org)
        self.callbacks = WriteCallbacks()
        self._write_api = self._client.write_api(
            write_options=WriteOptions(batch_size=max(config.batch_size, 1)),
            success_callback=self.callbacks.success,
            error_callback=self.callbacks.error,
            retry_callback=self.callbacks.retry,
        )
        self._closed = False
        logger.info(
            "InfluxDB writer ready: %s org=%s bucket=%s batch_size=%d",
            config.url, config.org, config.bucket, config.batch_size,
        )

    def __enter__(self) -> "InfluxPointWriter":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def write(self, point: TimeSeriesPoint) -> None:
        self._write_api.write(bucket=self._bucket, org=self._org, record=to_influx_point(point))

    def close(self) -> None:
        """Flush pending points and release the client."""
        if self._closed:
            return
        self._closed = True
        try:
            self._write_api.close()
        finally:
            self._client.close()
        logger.info(
            "InfluxDB writer closed (batches=%d errors=%d retries=%d)",
            self.callbacks.batches, self.callbacks.errors, self.callbacks.retries,
        )
