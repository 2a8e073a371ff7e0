"""
Unit tests for LinkManager.

Covers:
    - owner actions delegate with the owner's id
    - redirects match username AND platform (case-insensitive)
    - visits are counted; unknown targets raise NotFound without effect
    - redirect() builds a countdown that navigates to the link URL
    - search returns users with their links
"""

import pytest

from linkpro.errors import Forbidden, NotFound


def test_add_and_list(manager, ana):
    link = manager.add_link(ana, "GitHub", "https://github.com/ana", "GH", "my code")
    assert link.user_id == ana.id
    assert link.description == "my code"
    assert manager.links_of(ana) == [link]


def test_delete_other_users_link_forbidden(manager, ana, bob):
    link = manager.add_link(ana, "GitHub", "https://github.com/ana", "GH")
    with pytest.raises(Forbidden):
        manager.delete_link(bob, link.id)
    manager.delete_link(ana, link.id)
    assert manager.links_of(ana) == []


def test_resolve_matches_owner_and_platform(manager, ana, bob):
    manager.add_link(bob, "GitHub", "https://github.com/bob", "Bob")
    mine = manager.add_link(ana, "GitHub", "https://github.com/ana", "Ana")
    assert manager.resolve("ana", "github") == mine
    assert manager.resolve("ANA", "GITHUB") == mine


def test_resolve_does_not_count(manager, ana, links):
    link = manager.add_link(ana, "GitHub", "https://github.com/ana", "GH")
    manager.resolve("ana", "github")
    assert links.get(link.id).clicks == 0


@pytest.mark.parametrize("username,platform", [("ghost", "github"), ("ana", "twitter")])
def test_visit_unknown_target(manager, ana, store, username, platform):
    manager.add_link(ana, "GitHub", "https://github.com/ana", "GH")
    with pytest.raises(NotFound):
        manager.visit(username, platform)
    assert store.snapshot("click_logs") == []


def test_visit_counts_and_logs(manager, ana, click_log):
    link = manager.add_link(ana, "GitHub", "https://github.com/ana", "GH")
    updated = manager.visit("ana", "github", user_agent="Mozilla/5.0", referrer="https://x.com")
    assert updated.clicks == 1
    (entry,) = click_log.list_by_link_ids([link.id])
    assert entry.user_agent == "Mozilla/5.0"
    assert entry.referrer == "https://x.com"


def test_redirect_countdown_navigates_to_url(manager, ana, links):
    link = manager.add_link(ana, "GitHub", "https://github.com/ana", "GH")
    visited = []
    countdown = manager.redirect("ana", "github", visited.append, seconds=2)
    # the visit is counted up front, before the countdown runs
    assert links.get(link.id).clicks == 1
    countdown.step()
    assert visited == []
    countdown.step()
    assert visited == ["https://github.com/ana"]


def test_redirect_cancelled_never_navigates(manager, ana):
    manager.add_link(ana, "GitHub", "https://github.com/ana", "GH")
    visited = []
    with manager.redirect("ana", "github", visited.append, seconds=3, period=5.0):
        pass
    assert visited == []


def test_search_includes_links(manager, ana, bob):
    gh = manager.add_link(ana, "GitHub", "https://github.com/ana", "GH")
    manager.add_link(bob, "Medium", "https://medium.com/@bob", "Blog")
    results = manager.search("an")
    assert [r.user.username for r in results] == ["ana"]
    assert results[0].links == [gh]


def test_search_blank_query(manager, ana):
    assert manager.search("") == []
