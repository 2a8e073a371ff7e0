"""
Record types for LinkPro.

These pydantic models are what components hand to callers. Inside the store
they are kept as JSON-compatible dicts (`model_dump(mode="json")`), so the
in-memory and PostgreSQL backends persist exactly the same layout.

LLM Prompt Example:
    "Show how pydantic models can double as the persisted document schema and
    the API response schema without a separate ORM layer."
"""

import uuid
from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

Theme = Literal["light", "dark"]


def new_id() -> str:
    """Opaque unique identifier for any record."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(BaseModel):
    id: str = Field(default_factory=new_id)
    username: str
    email: str
    name: str
    theme: Theme = "light"
    created_at: datetime = Field(default_factory=utcnow)


class Credential(BaseModel):
    user_id: str
    password: str


class SessionToken(BaseModel):
    user_id: str
    username: str
    issued_at: datetime
    value: str


class ProfileLink(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    platform: str
    url: str
    title: str
    description: Optional[str] = None
    clicks: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class ClickLog(BaseModel):
    id: str = Field(default_factory=new_id)
    link_id: str
    timestamp: datetime = Field(default_factory=utcnow)
    user_agent: Optional[str] = None
    referrer: Optional[str] = None


# ---------------------------------------------------------------------------
# Read-side shapes (never persisted)
# ---------------------------------------------------------------------------

class DailyCount(BaseModel):
    date: str
    label: str
    count: int


class ActivityEntry(BaseModel):
    log_id: str
    link_id: str
    title: str
    timestamp: datetime


class PlatformTotal(BaseModel):
    platform: str
    clicks: int


class AnalyticsSummary(BaseModel):
    total_links: int
    platform_count: int
    total_clicks: int
    per_platform_clicks: Dict[str, int]
    top_platform: Optional[PlatformTotal] = None
    daily_clicks: List[DailyCount]
    recent_activity: List[ActivityEntry]


class DashboardSnapshot(BaseModel):
    user_id: str
    links: List[ProfileLink]
    click_logs: List[ClickLog]
    summary: AnalyticsSummary


class SearchResult(BaseModel):
    user: User
    links: List[ProfileLink]
