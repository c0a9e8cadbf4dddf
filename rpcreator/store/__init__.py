"""Key/value file store used for ``.rpc`` project files and ``rpc.ini``."""

from rpcreator.store.keyvalue import (
    DEFAULT_CAPACITY,
    MAX_ENTRIES,
    KeyValueStore,
    StoreEntry,
)

__all__ = ["DEFAULT_CAPACITY", "MAX_ENTRIES", "KeyValueStore", "StoreEntry"]
