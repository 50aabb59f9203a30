"""Protocol interfaces for stake_scanner components."""

from stake_scanner.interfaces.reader import StakeReader
from stake_scanner.interfaces.store import KeyValueStore, PersistenceError

__all__ = [
    "StakeReader",
    "KeyValueStore", "PersistenceError",
]
