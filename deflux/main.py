from __future__ import annotations

import asyncio
import logging
import sys

from .core.config import Settings, settings
from .core.errors import ConfigurationNotFound, EventStreamClosed, GatewayConnectionError
from .core.log import configure_logging
from .services.bootstrap import config_search_paths, output_default_configuration, resolve_configuration
from .services.event_source import open_event_stream
from .services.forwarder import Forwarder
from .storage.influx_writer import InfluxPointWriter


logger = logging.getLogger(__name__)


async def run(cfg: Settings = settings) -> int:
    try:
        config = resolve_configuration(config_search_paths(cfg))
    except ConfigurationNotFound as e:
        logger.warning("no configuration could be found: %s", e)
        await output_default_configuration(cfg)
        return 0

    try:
        stream = await open_event_stream(config.deconz, cfg)
    except GatewayConnectionError as e:
        logger.error("%s", e)
        return 1

    try:
        writer = InfluxPointWriter(config.influxdb2)
        try:
            await Forwarder(stream, writer, prefix=cfg.measurement_prefix).run()
        except EventStreamClosed as e:
            logger.error("%s", e)
        finally:
            writer.close()
    finally:
        await stream.aclose()
    return 1


def main() -> None:
    configure_logging(settings.log_level, settings.log_file)
    try:
        code = asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Interrupted, shutdown complete")
        code = 0
    sys.exit(code)
