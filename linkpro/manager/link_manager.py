"""
LinkManager module for LinkPro.

Responsibilities:
    - Owner actions: add and delete profile links
    - Public redirects: resolve `/{username}/{platform}` to a link and count the visit
    - Search: find users by name/username together with their links
    - Build the redirect countdown that performs the final navigation

Design notes:
    - A redirect matches BOTH the owner's username and the platform
      (case-insensitive), so two users with a "GitHub" link never collide.
    - Every click-producing path (redirect page, search result click) goes
      through `LinkRepository.record_visit`, which bumps the counter and
      appends the ClickLog in one transaction.

LLM Prompt Example:
    "Explain how a thin orchestration layer keeps views free of storage
    details while the repositories enforce the invariants."
"""

import logging
from typing import Callable, List, Optional

from ..config import settings
from ..errors import NotFound
from ..identity.identity_store import IdentityStore
from ..models import ProfileLink, SearchResult, User
from ..scheduler.countdown import RedirectCountdown
from .link_repository import LinkRepository

log = logging.getLogger("linkpro.links")


class LinkManager:
    """
    Coordinates identity lookups with link reads and writes.

    Args:
        identity (IdentityStore): User lookups.
        links (LinkRepository): Link storage and visit recording.
    """

    def __init__(self, identity: IdentityStore, links: LinkRepository):
        self.identity = identity
        self.links = links

    # ------------------------------------------------------------------
    # Owner actions
    # ------------------------------------------------------------------
    def add_link(
        self,
        owner: User,
        platform: str,
        url: str,
        title: str,
        description: Optional[str] = None,
    ) -> ProfileLink:
        return self.links.create(owner.id, platform, url, title, description)

    def delete_link(self, owner: User, link_id: str) -> None:
        self.links.delete(link_id, owner.id)

    def links_of(self, owner: User) -> List[ProfileLink]:
        return self.links.list_by_owner(owner.id)

    # ------------------------------------------------------------------
    # Public redirects
    # ------------------------------------------------------------------
    def resolve(self, username: str, platform: str) -> ProfileLink:
        """
        Find the link behind `/{username}/{platform}` without counting a visit.

        Raises:
            NotFound: Unknown user, or the user has no link on that platform.
        """
        with self.links.store.transaction() as txn:
            owner = self.identity.get_user_by_username(username, txn=txn)
            link = self.links.find_by_owner_platform(owner.id, platform, txn=txn) if owner else None
        if link is None:
            raise NotFound("Link not found.")
        return link

    def visit(
        self,
        username: str,
        platform: str,
        user_agent: Optional[str] = None,
        referrer: Optional[str] = None,
    ) -> ProfileLink:
        """
        Resolve `/{username}/{platform}` and record the visit.

        Returns:
            ProfileLink: The link with its updated click count.
        """
        with self.links.store.transaction() as txn:
            owner = self.identity.get_user_by_username(username, txn=txn)
            link = self.links.find_by_owner_platform(owner.id, platform, txn=txn) if owner else None
            if link is None:
                raise NotFound("Link not found.")
            updated = self.links.record_visit(link.id, user_agent=user_agent, referrer=referrer, txn=txn)
        log.info("Visit %s/%s -> %s (clicks=%d)", username, platform, updated.id, updated.clicks)
        return updated

    def redirect(
        self,
        username: str,
        platform: str,
        navigate: Callable[[str], None],
        user_agent: Optional[str] = None,
        referrer: Optional[str] = None,
        seconds: Optional[int] = None,
        on_tick: Optional[Callable[[int], None]] = None,
        period: float = 1.0,
    ) -> RedirectCountdown:
        """
        Record the visit and return an unstarted countdown that navigates to the link URL.

        Use it as a context manager so leaving the view cancels it:

            with manager.redirect("ana", "github", navigate) as countdown:
                ...
        """
        link = self.visit(username, platform, user_agent=user_agent, referrer=referrer)
        return RedirectCountdown(
            settings.REDIRECT_COUNTDOWN if seconds is None else seconds,
            on_complete=lambda: navigate(link.url),
            on_tick=on_tick,
            period=period,
        )

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------
    def search(self, query: str) -> List[SearchResult]:
        """Users matching `query` with their links, in registration order."""
        users = self.identity.search(query)
        if not users:
            return []
        all_links = self.links.list_all()
        return [
            SearchResult(user=user, links=[link for link in all_links if link.user_id == user.id])
            for user in users
        ]
