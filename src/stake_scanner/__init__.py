"""stake_scanner - batch scanner and aggregator for staking-contract deposits."""

__version__ = "0.1.0"
