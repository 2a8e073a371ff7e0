"""
Catalog of well-known platforms, used for icons and URL hints only.

Links may name any platform; nothing validates membership in this list.
"""

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Platform:
    name: str
    icon: str
    color: str
    base_url: str


PLATFORMS: List[Platform] = [
    Platform("GitHub", "🐙", "#333", "https://github.com/"),
    Platform("LinkedIn", "💼", "#0077B5", "https://linkedin.com/in/"),
    Platform("LeetCode", "🧠", "#FFA116", "https://leetcode.com/u/"),
    Platform("Twitter", "🐦", "#1DA1F2", "https://twitter.com/"),
    Platform("Instagram", "📸", "#E4405F", "https://instagram.com/"),
    Platform("Portfolio", "🌐", "#6366F1", ""),
    Platform("YouTube", "📺", "#FF0000", "https://youtube.com/@"),
    Platform("Medium", "✍️", "#00AB6C", "https://medium.com/@"),
]

DEFAULT_ICON = "🔗"


def get_platform_by_name(name: str) -> Optional[Platform]:
    wanted = (name or "").lower()
    for platform in PLATFORMS:
        if platform.name.lower() == wanted:
            return platform
    return None


def icon_for(name: str) -> str:
    platform = get_platform_by_name(name)
    return platform.icon if platform else DEFAULT_ICON
