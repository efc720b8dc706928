"""HTTP transport for the advisory service."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyevsim._constants import USER_AGENT
from pyevsim.config import SimulationConfig
from pyevsim.exceptions import AdvisoryTransportError

_logger = logging.getLogger(__name__)


class AdvisoryTransport(Protocol):
    """Structural transport interface used by the advisory client.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpAdvisoryTransport`) concrete.
    """

    async def post_json(self, endpoint: str, payload: Mapping[str, Any]) -> Any:
        ...


class HttpAdvisoryTransport:
    """POSTs JSON requests to the advisory service and decodes JSON replies."""

    def __init__(self, config: SimulationConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.advisory_timeout)

    async def post_json(self, endpoint: str, payload: Mapping[str, Any]) -> Any:
        url = f"{self._config.advisory_base_url}{endpoint}"
        headers = {
            "accept": "application/json",
            "content-type": "application/json; charset=UTF-8",
            "user-agent": USER_AGENT,
        }
        body = json.dumps(payload, separators=(",", ":"))

        _logger.debug("POST %s", url)

        try:
            async with self._http.post(url, data=body, headers=headers, timeout=self._timeout) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise AdvisoryTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except AdvisoryTransportError:
            raise
        except TimeoutError as exc:
            raise AdvisoryTransportError(f"Request to {endpoint} timed out", endpoint=endpoint) from exc
        except aiohttp.ClientError as exc:
            raise AdvisoryTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise AdvisoryTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc
