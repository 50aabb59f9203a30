"""RPC endpoint selection - single-pass failover over an ordered node list."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from web3 import AsyncHTTPProvider, AsyncWeb3

log = logging.getLogger(__name__)


class NodeConnectionError(ConnectionError):
    """No configured RPC endpoint passed its health probe."""


@dataclass
class NodeConnection:
    """A web3 client bound to the endpoint that answered the probe."""

    endpoint: str
    web3: Any  # AsyncWeb3
    block_number: int

    async def close(self) -> None:
        """Release the provider's HTTP session, if it holds one."""
        disconnect = getattr(self.web3.provider, "disconnect", None)
        if disconnect is None:
            return
        try:
            await disconnect()
        except Exception as exc:
            log.debug("Provider disconnect for %s failed: %s", self.endpoint, exc)


def _default_web3_factory(endpoint: str, timeout: float) -> AsyncWeb3:
    return AsyncWeb3(
        AsyncHTTPProvider(endpoint, request_kwargs={"timeout": timeout})
    )


class NodeSelector:
    """Picks the first healthy endpoint from an ordered list.

    Each endpoint is probed once (current block number, under
    ``probe_timeout``). There is no second pass and no retry here.
    """

    def __init__(
        self,
        endpoints: Sequence[str],
        probe_timeout: float = 10.0,
        web3_factory: Callable[[str, float], Any] | None = None,
    ) -> None:
        self._endpoints = list(endpoints)
        self._probe_timeout = probe_timeout
        self._web3_factory = web3_factory or _default_web3_factory

    async def connect(self) -> NodeConnection:
        if not self._endpoints:
            raise NodeConnectionError("No RPC endpoints configured")

        last_exc: BaseException | None = None
        for endpoint in self._endpoints:
            try:
                w3 = self._web3_factory(endpoint, self._probe_timeout)
                block = await asyncio.wait_for(
                    self._probe(w3), timeout=self._probe_timeout,
                )
            except Exception as exc:
                log.warning("Node %s failed health probe: %s", endpoint, exc)
                last_exc = exc
                continue

            log.info("Connected to %s (block %d)", endpoint, block)
            return NodeConnection(endpoint=endpoint, web3=w3, block_number=block)

        raise NodeConnectionError(
            f"All {len(self._endpoints)} RPC endpoints failed: {last_exc}"
        ) from last_exc

    @staticmethod
    async def _probe(w3: Any) -> int:
        return int(await w3.eth.block_number)
