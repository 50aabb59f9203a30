"""StakeReader protocol - per-address reads the batch scanner depends on."""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol

from stake_scanner.models.records import RawStakeRecord


class StakeReader(Protocol):
    """Read-only access to the staking contract.

    Implementations apply their own retry policy; an exception raised here
    means the read is given up on.
    """

    async def get_stake_count(self, address: str) -> int:
        """Number of stake records held by ``address``."""
        ...

    async def get_stake_record(self, address: str, index: int) -> RawStakeRecord:
        """The ``index``-th stake record of ``address``."""
        ...

    async def get_pool_balance(self, pool_address: str) -> Decimal:
        """Token balance of a liquidity pool. Returns 0 on failure."""
        ...
