"""
Base store interface for LinkPro.

Purpose:
    Define a small, stable contract that multiple persistence backends
    (in-memory, PostgreSQL) implement without requiring changes to the
    identity, link or click-log components.

Contract:
    The store holds a fixed set of named collections (see `COLLECTIONS`).
    Every access happens inside `store.transaction()`:

        with store.transaction() as txn:
            links = txn.read("links")
            links.append(new_link)
            txn.write("links", links)

    - One exclusive, re-entrant lock per store serialises transactions, reads
      included, so readers never observe a half-applied write.
    - `read` returns a deep copy; mutating it has no effect until `write`.
    - `write` replaces the whole collection.
    - Writes become visible only when the `with` block exits cleanly. An
      exception inside the block discards them.
    - A `transaction()` opened inside another on the same thread is the same
      transaction, so it never blocks on the outer one and never commits early.

Testing & Coverage:
    Abstract methods are annotated with `# pragma: no cover`; they are not
    executed directly in tests.

LLM Prompt Example:
    "Show how a narrow snapshot/replace contract lets a localStorage-style
    key/value layout move to PostgreSQL without touching service code."
"""

import contextlib
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, Optional

# collection name -> value used when nothing was ever written
COLLECTIONS: Dict[str, Any] = {
    "users": {},
    "credentials": {},
    "links": [],
    "click_logs": [],
    "session": None,
}


def empty_value(key: str) -> Any:
    """Fresh default for a collection; raises KeyError for unknown names."""
    default = COLLECTIONS[key]
    return type(default)() if default is not None else None


class StoreTransaction(ABC):
    """Handle passed to the body of `BaseStore.transaction()`."""

    @abstractmethod  # pragma: no cover
    def read(self, key: str) -> Any:
        """Return a private copy of the collection `key`."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def write(self, key: str, value: Any) -> None:
        """Replace the collection `key` with `value`."""
        raise NotImplementedError


class BaseStore(ABC):
    """Abstract base class for store backends."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        # the transaction this thread currently has open, if any
        self._local = threading.local()

    @contextlib.contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        """
        Open an exclusive transaction over every collection.

        A nested call on the same thread joins the open transaction: its writes
        commit or roll back with the outermost block.
        """
        with self._lock:
            active = getattr(self._local, "txn", None)
            if active is not None:
                yield active
                return
            with self._begin() as txn:
                self._local.txn = txn
                try:
                    yield txn
                finally:
                    self._local.txn = None

    def snapshot(self, key: str) -> Any:
        """Shorthand for a one-collection read in its own transaction."""
        with self.transaction() as txn:
            return txn.read(key)

    @abstractmethod  # pragma: no cover
    def _begin(self) -> "contextlib.AbstractContextManager[StoreTransaction]":
        """
        Backend hook: yield a transaction, commit on clean exit, discard on error.

        LLM Prompt Example:
            "Explain how to map this hook onto a database transaction with
            BEGIN/COMMIT/ROLLBACK and an advisory lock."
        """
        raise NotImplementedError


@contextlib.contextmanager
def use_transaction(store: BaseStore, txn: Optional[StoreTransaction] = None) -> Iterator[StoreTransaction]:
    """Join the caller's transaction when given one, else open a fresh one."""
    if txn is not None:
        yield txn
    else:
        with store.transaction() as own:
            yield own
