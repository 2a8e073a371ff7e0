"""
Application container: one store, every component wired to it.

    linkpro = LinkPro()                       # memory store by default
    linkpro.session.start()                   # restore a persisted session
    linkpro.session.signup("ana", "ana@x.com", "secret1", "Ana")
    with linkpro.dashboard(on_refresh=render) as dashboard:
        ...

Components never build their own store; they receive this container's one,
so every view reads and writes the same state.
"""

from typing import Callable, Optional

from .analytics.click_log import ClickEventLog
from .identity.identity_store import IdentityStore
from .manager.link_manager import LinkManager
from .manager.link_repository import LinkRepository
from .models import DashboardSnapshot
from .scheduler.refresh import RefreshScheduler
from .session.controller import SessionController
from .storage.base import BaseStore
from .storage.storage_factory import get_store


class LinkPro:
    def __init__(self, store: Optional[BaseStore] = None, identity: Optional[IdentityStore] = None):
        self.store = store or get_store()
        self.identity = identity or IdentityStore(self.store)
        self.click_log = ClickEventLog(self.store)
        self.links = LinkRepository(self.store, click_log=self.click_log)
        self.manager = LinkManager(self.identity, self.links)
        self.session = SessionController(self.identity)

    def dashboard(
        self,
        on_refresh: Optional[Callable[[DashboardSnapshot], None]] = None,
        interval: Optional[float] = None,
    ) -> RefreshScheduler:
        """A scheduler for the signed-in owner's dashboard (not started)."""
        return RefreshScheduler(
            self.session,
            self.links,
            click_log=self.click_log,
            interval=interval,
            on_refresh=on_refresh,
        )
