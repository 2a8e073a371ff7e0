"""
Click event log for LinkPro.

Responsibilities:
    - Append click events (the only mutation)
    - List events for a set of links, in append order
    - Bucket events into a daily series

Attributes of each event: id, link_id, timestamp, user_agent, referrer.
`link_id` is not checked against the link collection; events for deleted or
unknown links are kept and simply fail to resolve a title later.

LLM Prompt Example:
    "Explain how to extend this click log to store events in a dedicated
    append-only table while preserving the existing API."
"""

from datetime import date, datetime, timezone
from typing import Callable, Iterable, List, Optional

from ..models import ClickLog, DailyCount
from ..storage.base import BaseStore, StoreTransaction, use_transaction
from .aggregator import daily_series


class ClickEventLog:
    def __init__(
        self,
        store: BaseStore,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.store = store
        self.clock = clock

    def append(
        self,
        link_id: str,
        timestamp: Optional[datetime] = None,
        user_agent: Optional[str] = None,
        referrer: Optional[str] = None,
        txn: Optional[StoreTransaction] = None,
    ) -> ClickLog:
        """
        Append one click event. Always succeeds.

        Args:
            link_id (str): Link that was clicked (not validated).
            timestamp (Optional[datetime]): Event time; defaults to now.
            user_agent (Optional[str]): Visitor's user agent, if known.
            referrer (Optional[str]): Referring page, if known.
            txn (Optional[StoreTransaction]): Join an open transaction.
        """
        entry = ClickLog(
            link_id=link_id,
            timestamp=timestamp or self.clock(),
            user_agent=user_agent,
            referrer=referrer,
        )
        with use_transaction(self.store, txn) as t:
            logs = t.read("click_logs")
            logs.append(entry.model_dump(mode="json"))
            t.write("click_logs", logs)
        return entry

    def list_all(self, txn: Optional[StoreTransaction] = None) -> List[ClickLog]:
        with use_transaction(self.store, txn) as t:
            return [ClickLog.model_validate(raw) for raw in t.read("click_logs")]

    def list_by_link_ids(self, link_ids: Iterable[str], txn: Optional[StoreTransaction] = None) -> List[ClickLog]:
        """All events whose link_id is in `link_ids`, in append order."""
        wanted = set(link_ids)
        if not wanted:
            return []
        with use_transaction(self.store, txn) as t:
            return [
                ClickLog.model_validate(raw)
                for raw in t.read("click_logs")
                if raw["link_id"] in wanted
            ]

    def count_for_link(self, link_id: str, txn: Optional[StoreTransaction] = None) -> int:
        return len(self.list_by_link_ids([link_id], txn=txn))

    def daily_counts(
        self,
        link_ids: Iterable[str],
        window_days: int = 7,
        today: Optional[date] = None,
    ) -> List[DailyCount]:
        """
        Per-day click counts over the last `window_days` days ending `today`.

        Returns exactly `window_days` entries, oldest first; empty days have count 0.
        """
        logs = self.list_by_link_ids(link_ids)
        return daily_series(logs, window_days, today or self.clock().date())
