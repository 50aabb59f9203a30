"""Chain access - endpoint failover, retry and staking-contract reads."""

from stake_scanner.chain.client import StakingContractClient, to_token_amount
from stake_scanner.chain.nodes import NodeConnection, NodeConnectionError, NodeSelector
from stake_scanner.chain.retry import retry

__all__ = [
    "StakingContractClient",
    "to_token_amount",
    "NodeConnection",
    "NodeConnectionError",
    "NodeSelector",
    "retry",
]
