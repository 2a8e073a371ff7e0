"""
Analytics rollups for the LinkPro dashboard.

Pure functions of `(links, click_logs)` snapshots; nothing here reads the
store or keeps state, so calling them twice on the same snapshot gives the
same result.

Platform strings are compared exactly ("GitHub" and "github" are two
buckets). Ties for the top platform go to the one seen first in `links`.

LLM Prompt Example:
    "Suggest ways to extend this summary to include weekly aggregation and
    week-over-week growth."
"""

from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence

from ..models import (
    ActivityEntry,
    AnalyticsSummary,
    ClickLog,
    DailyCount,
    PlatformTotal,
    ProfileLink,
)

UNKNOWN_LINK_TITLE = "Unknown Link"


def total_clicks(links: Sequence[ProfileLink]) -> int:
    return sum(link.clicks for link in links)


def per_platform_clicks(links: Sequence[ProfileLink]) -> Dict[str, int]:
    """platform -> summed clicks, in first-seen order."""
    totals: Dict[str, int] = {}
    for link in links:
        totals[link.platform] = totals.get(link.platform, 0) + link.clicks
    return totals


def top_platform(links: Sequence[ProfileLink]) -> Optional[PlatformTotal]:
    best: Optional[PlatformTotal] = None
    for platform, clicks in per_platform_clicks(links).items():
        # strict ">" keeps the first platform among equals
        if best is None or clicks > best.clicks:
            best = PlatformTotal(platform=platform, clicks=clicks)
    return best


def recent_activity(
    links: Sequence[ProfileLink],
    click_logs: Sequence[ClickLog],
    n: int = 5,
) -> List[ActivityEntry]:
    """
    The last `n` events, most recent first, with the link title resolved.

    Events pointing at a link not in `links` get the "Unknown Link" title.
    """
    if n <= 0:
        return []
    titles = {link.id: link.title for link in links}
    return [
        ActivityEntry(
            log_id=log.id,
            link_id=log.link_id,
            title=titles.get(log.link_id, UNKNOWN_LINK_TITLE),
            timestamp=log.timestamp,
        )
        for log in reversed(list(click_logs)[-n:])
    ]


def daily_series(click_logs: Sequence[ClickLog], window_days: int, today: date) -> List[DailyCount]:
    """
    Bucket events by the calendar day of their own timestamp.

    The window is `window_days` days ending at `today` (inclusive), oldest
    first. Days without events still appear with a count of 0.
    """
    if window_days <= 0:
        return []
    days = [today - timedelta(days=offset) for offset in range(window_days - 1, -1, -1)]
    counts = {day: 0 for day in days}
    for log in click_logs:
        day = log.timestamp.date()
        if day in counts:
            counts[day] += 1
    return [
        DailyCount(date=day.isoformat(), label=day.strftime("%a"), count=counts[day])
        for day in days
    ]


def summarize(
    links: Sequence[ProfileLink],
    click_logs: Sequence[ClickLog],
    today: date,
    window_days: int = 7,
    recent: int = 5,
) -> AnalyticsSummary:
    """Every dashboard rollup for one snapshot."""
    return AnalyticsSummary(
        total_links=len(links),
        platform_count=len({link.platform for link in links}),
        total_clicks=total_clicks(links),
        per_platform_clicks=per_platform_clicks(links),
        top_platform=top_platform(links),
        daily_clicks=daily_series(click_logs, window_days, today),
        recent_activity=recent_activity(links, click_logs, recent),
    )
