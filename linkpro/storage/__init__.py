from .base import BaseStore, StoreTransaction, use_transaction
from .storage import MemoryStore
from .storage_factory import get_store

__all__ = ["BaseStore", "StoreTransaction", "use_transaction", "MemoryStore", "get_store"]
