"""Typed read calls against the staking contract and the pool token."""

from __future__ import annotations

import logging
from decimal import Decimal

from web3 import Web3

from stake_scanner.chain.abi import ERC20_ABI, STAKING_ABI
from stake_scanner.chain.nodes import NodeConnection
from stake_scanner.chain.retry import retry
from stake_scanner.models.records import RawStakeRecord

log = logging.getLogger(__name__)


def to_token_amount(raw: int) -> Decimal:
    """Convert an 18-decimal fixed-point integer to a token amount."""
    return Decimal(Web3.from_wei(int(raw), "ether"))


class StakingContractClient:
    """Read-only client for the staking contract, bound to one node.

    Every call goes through :func:`retry`; an exception leaving a method
    means all attempts failed. ``get_pool_balance`` is the exception: it is
    informational only and reports 0 instead of raising.
    """

    def __init__(
        self,
        connection: NodeConnection,
        staking_address: str,
        token_address: str,
        retry_limit: int = 3,
        retry_delay: float = 1.0,
    ) -> None:
        w3 = connection.web3
        self._endpoint = connection.endpoint
        self._staking = w3.eth.contract(
            address=Web3.to_checksum_address(staking_address), abi=STAKING_ABI,
        )
        self._token = w3.eth.contract(
            address=Web3.to_checksum_address(token_address), abi=ERC20_ABI,
        )
        self._retry_limit = retry_limit
        self._retry_delay = retry_delay

    async def get_stake_count(self, address: str) -> int:
        account = Web3.to_checksum_address(address)
        count = await retry(
            lambda: self._staking.functions.stakeCount(account).call(),
            self._retry_limit,
            self._retry_delay,
            description=f"stakeCount({address})",
        )
        return int(count)

    async def get_stake_record(self, address: str, index: int) -> RawStakeRecord:
        account = Web3.to_checksum_address(address)
        raw = await retry(
            lambda: self._staking.functions.userStakeRecord(account, index).call(),
            self._retry_limit,
            self._retry_delay,
            description=f"userStakeRecord({address}, {index})",
        )
        stake_time, amount, redeemed, stake_index = raw
        return RawStakeRecord(
            stake_time=int(stake_time),
            amount_raw=int(amount),
            is_redeemed=bool(redeemed),
            stake_index=int(stake_index),
        )

    async def get_pool_balance(self, pool_address: str) -> Decimal:
        try:
            pool = Web3.to_checksum_address(pool_address)
            raw = await retry(
                lambda: self._token.functions.balanceOf(pool).call(),
                self._retry_limit,
                self._retry_delay,
                description=f"balanceOf({pool_address})",
            )
            return to_token_amount(raw)
        except Exception as exc:
            log.warning("get_pool_balance(%s) failed: %s", pool_address, exc)
            return Decimal(0)
