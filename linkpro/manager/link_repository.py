"""
Link repository for LinkPro.

Responsibilities:
    - Create profile links for an owner
    - List an owner's links in insertion order
    - Record visits (click counter + click log, as one transaction)
    - Delete links on behalf of their owner only

Design:
    - Links live in the `links` collection as a list, which keeps insertion order.
    - `record_visit` increments the counter and appends the ClickLog inside one
      store transaction, so no reader can see one without the other and
      `link.clicks` always equals the number of log entries for that link.
    - Platform strings are free text; the catalog in `linkpro.platforms` is
      only consulted for icons.

LLM Prompt Example:
    "Explain how to keep a denormalised counter consistent with an event log
    (SQL: UPDATE ... SET clicks = clicks + 1 and INSERT in one transaction)."
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from ..analytics.click_log import ClickEventLog
from ..errors import Forbidden, NotFound, ValidationError
from ..models import ProfileLink
from ..storage.base import BaseStore, StoreTransaction, use_transaction

log = logging.getLogger("linkpro.links")


def _index_of(links: List[Dict[str, Any]], link_id: str) -> int:
    for i, raw in enumerate(links):
        if raw["id"] == link_id:
            return i
    raise NotFound("Link not found.")


class LinkRepository:
    def __init__(
        self,
        store: BaseStore,
        click_log: Optional[ClickEventLog] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        """
        Args:
            store (BaseStore): Shared store instance.
            click_log (Optional[ClickEventLog]): Log that receives visit events;
                built over the same store when omitted.
            clock (Callable[[], datetime]): Source of "now".
        """
        self.store = store
        self.click_log = click_log or ClickEventLog(store, clock=clock)
        self.clock = clock

    def create(
        self,
        user_id: str,
        platform: str,
        url: str,
        title: str,
        description: Optional[str] = None,
    ) -> ProfileLink:
        """
        Create a link owned by `user_id` with zero clicks.

        Raises:
            ValidationError: If platform, url or title is blank.
        """
        if not (platform and platform.strip()):
            raise ValidationError("Please choose a platform.")
        if not (url and url.strip()):
            raise ValidationError("URL is required.")
        if not (title and title.strip()):
            raise ValidationError("Title is required.")

        now = self.clock()
        link = ProfileLink(
            user_id=user_id,
            platform=platform.strip(),
            url=url.strip(),
            title=title.strip(),
            description=(description or "").strip() or None,
            clicks=0,
            created_at=now,
            updated_at=now,
        )
        with self.store.transaction() as txn:
            links = txn.read("links")
            links.append(link.model_dump(mode="json"))
            txn.write("links", links)
        log.info("Created link %s (%s) for user %s", link.id, link.platform, user_id)
        return link

    def get(self, link_id: str, txn: Optional[StoreTransaction] = None) -> ProfileLink:
        with use_transaction(self.store, txn) as t:
            links = t.read("links")
        return ProfileLink.model_validate(links[_index_of(links, link_id)])

    def list_all(self, txn: Optional[StoreTransaction] = None) -> List[ProfileLink]:
        with use_transaction(self.store, txn) as t:
            return [ProfileLink.model_validate(raw) for raw in t.read("links")]

    def list_by_owner(self, user_id: str, txn: Optional[StoreTransaction] = None) -> List[ProfileLink]:
        """The owner's links in insertion order."""
        return [link for link in self.list_all(txn=txn) if link.user_id == user_id]

    def find_by_owner_platform(
        self, user_id: str, platform: str, txn: Optional[StoreTransaction] = None
    ) -> Optional[ProfileLink]:
        """First link of `user_id` whose platform matches case-insensitively."""
        wanted = (platform or "").lower()
        for link in self.list_by_owner(user_id, txn=txn):
            if link.platform.lower() == wanted:
                return link
        return None

    def record_visit(
        self,
        link_id: str,
        user_agent: Optional[str] = None,
        referrer: Optional[str] = None,
        timestamp: Optional[datetime] = None,
        txn: Optional[StoreTransaction] = None,
    ) -> ProfileLink:
        """
        Count one visit: clicks += 1, updated_at = now, and append a ClickLog.

        Both writes share one transaction.

        Raises:
            NotFound: If the link does not exist (nothing is written).
        """
        now = timestamp or self.clock()
        with use_transaction(self.store, txn) as t:
            links = t.read("links")
            raw = links[_index_of(links, link_id)]
            raw["clicks"] += 1
            raw["updated_at"] = now.isoformat()
            t.write("links", links)
            self.click_log.append(link_id, timestamp=now, user_agent=user_agent, referrer=referrer, txn=t)
        return ProfileLink.model_validate(raw)

    def delete(self, link_id: str, requester_user_id: str) -> None:
        """
        Permanently remove a link.

        Raises:
            NotFound: If the link does not exist.
            Forbidden: If `requester_user_id` does not own the link.
        """
        with self.store.transaction() as txn:
            links = txn.read("links")
            idx = _index_of(links, link_id)
            if links[idx]["user_id"] != requester_user_id:
                raise Forbidden()
            del links[idx]
            txn.write("links", links)
        log.info("Deleted link %s for user %s", link_id, requester_user_id)
