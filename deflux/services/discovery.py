from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..core.errors import DiscoveryError
from ..domain.models import DiscoveredGateway

logger = logging.getLogger(__name__)


def _parse_gateway(item: Any) -> DiscoveredGateway:
    return DiscoveredGateway(
        id=str(item.get("id", "")),
        name=str(item.get("name", "")),
        internal_ip=str(item["internalipaddress"]),
        internal_port=int(item.get("internalport", 80)),
        mac=str(item.get("macaddress", "")),
    )


async def discover_gateways(
    url: str,
    timeout: float = 10.0,
    client: Optional[httpx.AsyncClient] = None,
) -> list[DiscoveredGateway]:
    """Ask the Phoscon discovery service for deCONZ gateways on this network.

    Returns gateways in the order the service reports them, possibly none.
    Raises DiscoveryError when the service cannot be reached or answers
    with something other than a list of gateways.
    """
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=timeout)
    try:
        resp = await client.get(url)
        resp.raise_for_status()
        data = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        raise DiscoveryError(f"gateway discovery via {url} failed: {e}") from e
    finally:
        if owns_client:
            await client.aclose()

    if not isinstance(data, list):
        raise DiscoveryError(f"unexpected discovery response: {data!r}")

    gateways: list[DiscoveredGateway] = []
    for item in data:
        try:
            gateways.append(_parse_gateway(item))
        except (KeyError, TypeError, ValueError, AttributeError):
            logger.warning("Ignoring malformed discovery entry: %r", item)

    logger.info("Discovery found %d deCONZ gateway(s)", len(gateways))
    return gateways
