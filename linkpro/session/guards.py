"""
Route guards: what a view should do for the current session state.

- Protected views (dashboard, search) wait while LOADING and send anonymous
  visitors to /login.
- Public auth views (login, signup) send signed-in users to /dashboard.
"""

from dataclasses import dataclass
from typing import Optional

from .controller import SessionState

LOGIN_PATH = "/login"
DASHBOARD_PATH = "/dashboard"


@dataclass(frozen=True)
class GuardDecision:
    action: str  # "render" | "wait" | "redirect"
    location: Optional[str] = None


RENDER = GuardDecision("render")
WAIT = GuardDecision("wait")


def guard(state: SessionState, protected: bool) -> GuardDecision:
    if state is SessionState.LOADING:
        return WAIT
    signed_in = state is SessionState.AUTHENTICATED
    if protected and not signed_in:
        return GuardDecision("redirect", LOGIN_PATH)
    if not protected and signed_in:
        return GuardDecision("redirect", DASHBOARD_PATH)
    return RENDER
