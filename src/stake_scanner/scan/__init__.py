"""Batch scanning and aggregation."""

from stake_scanner.scan.aggregator import StakeAggregator, aggregate, utc_date
from stake_scanner.scan.batch import BatchScanner, stake_record_from_raw

__all__ = [
    "StakeAggregator", "aggregate", "utc_date",
    "BatchScanner", "stake_record_from_raw",
]
