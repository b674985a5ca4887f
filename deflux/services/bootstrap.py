from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional, Sequence, TextIO

import yaml

from ..core.config import Configuration, DeconzConfig, Influxdb2Config, Settings, settings
from ..core.errors import ConfigurationError, ConfigurationNotFound, DefluxError
from ..domain.models import DiscoveredGateway
from ..drivers.deconz_api import DeconzAPI
from .discovery import discover_gateways

logger = logging.getLogger(__name__)

DiscoverFn = Callable[[], Awaitable[list[DiscoveredGateway]]]
PairFn = Callable[[str], Awaitable[str]]

PLACEHOLDER = "change me"
DEFAULT_DECONZ_ADDR = "http://127.0.0.1:8080/"
DEFAULT_INFLUXDB_URL = "http://127.0.0.1:8086/"
DEFAULT_BATCH_SIZE = 20


def config_search_paths(cfg: Settings = settings) -> list[Path]:
    return [
        Path.cwd() / cfg.config_filename,
        Path(cfg.system_config_dir) / cfg.config_filename,
    ]


def load_configuration(path: Path) -> Configuration:
    try:
        text = path.read_text()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"could not read configuration {path}: {e}") from e
    try:
        return Configuration.from_yaml(text)
    except (yaml.YAMLError, ValueError) as e:
        raise ConfigurationError(f"could not parse configuration {path}: {e}") from e


def resolve_configuration(paths: Optional[Sequence[Path]] = None) -> Configuration:
    """Return the configuration from the first path that reads and parses.

    Later paths are not consulted once one succeeds. Raises
    ConfigurationNotFound carrying every failure when none does.
    """
    if paths is None:
        paths = config_search_paths()

    causes: list[Exception] = []
    for path in paths:
        try:
            config = load_configuration(path)
        except ConfigurationError as e:
            logger.debug("%s", e)
            causes.append(e)
            continue
        logger.info("Using configuration %s", path)
        return config

    raise ConfigurationNotFound(causes)


def skeleton_configuration() -> Configuration:
    return Configuration(
        deconz=DeconzConfig(addr=DEFAULT_DECONZ_ADDR, api_key=PLACEHOLDER),
        influxdb2=Influxdb2Config(
            url=DEFAULT_INFLUXDB_URL,
            org=PLACEHOLDER,
            token=PLACEHOLDER,
            bucket=PLACEHOLDER,
            batch_size=DEFAULT_BATCH_SIZE,
        ),
    )


async def default_configuration(discover: DiscoverFn, pair: PairFn) -> Configuration:
    """Build a default configuration, filling in what discovery and pairing can find.

    Discovery and pairing failures leave the placeholder in place; this never
    raises for them.
    """
    config = skeleton_configuration()

    try:
        gateways = await discover()
    except DefluxError as e:
        logger.warning("discovery of deCONZ gateway failed: %s, please fill configuration manually", e)
        return config

    if not gateways:
        logger.warning("no deCONZ gateway discovered, please fill configuration manually")
        return config

    # only the first gateway is used
    gateway = gateways[0]
    if len(gateways) > 1:
        logger.info(
            "Discovered %d gateways, using %s (%s:%d)",
            len(gateways), gateway.name or gateway.id, gateway.internal_ip, gateway.internal_port,
        )
    addr = gateway.api_url
    config = config.model_copy(update={"deconz": config.deconz.model_copy(update={"addr": addr})})

    try:
        api_key = await pair(addr)
    except DefluxError as e:
        logger.warning("unable to pair with deCONZ: %s, please fill out APIKey manually", e)
        return config

    return config.model_copy(update={"deconz": config.deconz.model_copy(update={"api_key": api_key})})


async def output_default_configuration(cfg: Settings = settings, stream: TextIO = sys.stdout) -> Configuration:
    async def discover() -> list[DiscoveredGateway]:
        return await discover_gateways(cfg.discovery_url, timeout=cfg.http_timeout)

    async def pair(addr: str) -> str:
        async with DeconzAPI(addr, timeout=cfg.http_timeout) as api:
            return await api.pair(cfg.device_type)

    config = await default_configuration(discover, pair)
    target = Path(cfg.system_config_dir) / cfg.config_filename
    logger.info("Outputting default configuration, save this to %s", target)
    stream.write(config.to_yaml())
    stream.flush()
    return config
