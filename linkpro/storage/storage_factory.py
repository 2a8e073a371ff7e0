"""
Store factory
=============

Picks the store backend for a LinkPro container. Every component receives
the store it returns; none of them knows which backend is behind it.

Backends
--------
- "memory"   : MemoryStore, state lives as long as the process (default)
- "postgres" : DBStore, state survives restarts; needs a DSN

Environment variables (read on every call, so tests can monkeypatch them)
-------------------------------------------------------------------------
- LINKPRO_STORAGE_BACKEND
- LINKPRO_DB_DSN

psycopg is only imported when the postgres backend is actually selected.

LLM Prompt
----------
You are adding a backend. Implement BaseStore._begin, register the name here,
and keep "memory" the default.
"""

import logging
import os
from typing import Optional

from linkpro.storage.base import BaseStore
from linkpro.storage.storage import MemoryStore

log = logging.getLogger("linkpro.storage")


def get_store(backend: Optional[str] = None, **kwargs) -> BaseStore:
    """
    Build the configured store.

    Parameters
    ----------
    backend : str, optional
        Backend name; falls back to LINKPRO_STORAGE_BACKEND, then "memory".
    kwargs : dict
        Backend options. The postgres backend takes dsn="..." (else LINKPRO_DB_DSN).

    Raises
    ------
    ValueError
        Unknown backend name, or postgres selected without a DSN.
    """
    name = (backend or os.getenv("LINKPRO_STORAGE_BACKEND", "memory")).strip().lower()
    log.info("Selected store backend: %r", name)

    if name == "memory":
        return MemoryStore()

    if name == "postgres":
        dsn = kwargs.get("dsn") or os.getenv("LINKPRO_DB_DSN", "")
        if not dsn:
            raise ValueError("DB_DSN is required for postgres backend (env LINKPRO_DB_DSN)")
        from linkpro.storage.db_storage import DBStore
        return DBStore(dsn=dsn)

    raise ValueError(f"Unknown storage backend: {name!r}")
