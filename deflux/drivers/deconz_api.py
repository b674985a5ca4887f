from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..core.errors import GatewayError, PairingError
from ..domain.models import SensorInfo

logger = logging.getLogger(__name__)


def _gateway_error(data: Any) -> Optional[str]:
    """Return the description of the first deCONZ error object in *data*, if any."""
    if isinstance(data, list):
        for item in data:
            if isinstance(item, dict) and isinstance(item.get("error"), dict):
                err = item["error"]
                return f"{err.get('description', 'unknown error')} (type {err.get('type', '?')})"
    return None


class DeconzAPI:
    """REST client for a deCONZ gateway.

    ``addr`` is the API base, e.g. ``http://10.0.0.5:80/api``; resource
    paths are ``<addr>/<api key>/<resource>``.
    """

    def __init__(
        self,
        addr: str,
        api_key: str = "",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._addr = addr.rstrip("/")
        self._api_key = api_key
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def addr(self) -> str:
        return self._addr

    async def __aenter__(self) -> "DeconzAPI":
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, resource: str, **kwargs: Any) -> Any:
        url = self._addr if not resource else f"{self._addr}/{self._api_key}/{resource}"
        what = f"{method} /{resource}" if resource else f"{method} {self._addr}"
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise GatewayError(f"{what} failed: {e}") from e

        try:
            data = resp.json()
        except ValueError:
            data = None

        description = _gateway_error(data)
        if description:
            raise GatewayError(f"{what}: {description}")
        if resp.is_error:
            raise GatewayError(f"{what}: HTTP {resp.status_code}")
        if data is None:
            raise GatewayError(f"{what}: response is not JSON")
        return data

    async def pair(self, device_type: str = "deflux") -> str:
        """Request a new API key. The gateway must be unlocked for pairing."""
        try:
            data = await self._request("POST", "", json={"devicetype": device_type})
        except GatewayError as e:
            raise PairingError(str(e)) from e
        try:
            key = data[0]["success"]["username"]
        except (KeyError, IndexError, TypeError):
            raise PairingError(f"unexpected pairing response: {data!r}") from None
        logger.info("Paired with deCONZ at %s", self._addr)
        return str(key)

    async def sensors(self) -> dict[str, SensorInfo]:
        data = await self._request("GET", "sensors")
        if not isinstance(data, dict):
            raise GatewayError(f"unexpected sensors response: {data!r}")
        out: dict[str, SensorInfo] = {}
        for sid, s in data.items():
            if not isinstance(s, dict):
                continue
            out[str(sid)] = SensorInfo(id=str(sid), name=str(s.get("name", "")), type=str(s.get("type", "")))
        return out

    async def websocket_url(self) -> str:
        data = await self._request("GET", "config")
        port = data.get("websocketport") if isinstance(data, dict) else None
        if not isinstance(port, int) or isinstance(port, bool):
            raise GatewayError(f"gateway config has no usable websocketport: {port!r}")
        host = httpx.URL(self._addr).host
        return f"ws://{host}:{port}"
