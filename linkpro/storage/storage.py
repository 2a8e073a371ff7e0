"""
Store module for LinkPro (in-memory implementation).

Responsibilities:
    - Hold the users, credentials, links, click_logs and session collections
    - Hand out snapshot copies on read
    - Stage writes and publish them atomically on commit

Design:
    - This is the in-memory reference implementation of the BaseStore contract.
    - It lives as long as the process; use DBStore when state must survive restarts.
    - It is intentionally simple to keep unit/integration tests fast and deterministic.

LLM Prompt Example:
    "Explain how staging writes in a per-transaction dict gives all-or-nothing
     semantics for an in-memory store without copying the whole state up front."
"""

import contextlib
import copy
from typing import Any, Dict, Iterator

from .base import BaseStore, StoreTransaction, empty_value


class _MemoryTransaction(StoreTransaction):
    def __init__(self, data: Dict[str, Any]):
        self._data = data
        self.pending: Dict[str, Any] = {}

    def read(self, key: str) -> Any:
        if key in self.pending:
            return copy.deepcopy(self.pending[key])
        if key in self._data:
            return copy.deepcopy(self._data[key])
        return empty_value(key)

    def write(self, key: str, value: Any) -> None:
        empty_value(key)  # reject unknown collection names
        self.pending[key] = copy.deepcopy(value)


class MemoryStore(BaseStore):
    def __init__(self):
        """
        Initialize empty collections.

        Internal schema:
            self.data = {
                "users":       {user_id: {...User}},
                "credentials": {user_id: {"user_id": str, "password": str}},
                "links":       [{...ProfileLink}, ...],   # insertion order
                "click_logs":  [{...ClickLog}, ...],      # append order
                "session":     {"token": str, "user_id": str} | None,
            }
        """
        super().__init__()
        self.data: Dict[str, Any] = {}

    @contextlib.contextmanager
    def _begin(self) -> Iterator[StoreTransaction]:
        txn = _MemoryTransaction(self.data)
        yield txn
        # Only reached on a clean exit; an exception leaves self.data untouched
        self.data.update(txn.pending)
