"""
Main API module for LinkPro.

Responsibilities:
    - Expose signup/login and the current user's profile and theme
    - Let owners add, list and delete their profile links
    - Serve the dashboard snapshot (links, click logs, analytics rollups)
    - Search users and their links
    - Resolve tracked short links `/{username}/{platform}` and count the visit

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - One LinkPro container per app: a single store shared by every route.
    - Routes are thin; the identity store, link repository and click log
      enforce the invariants and raise LinkProError subclasses, which one
      exception handler turns into JSON errors.

LLM Prompt Example:
    "Explain how to structure a FastAPI service with an application factory,
    injected dependencies, and a clean separation between API and business logic."
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response
from pydantic import BaseModel

from auth.dependencies import get_current_user
from auth.schemas import LoginRequest, SignupRequest, ThemeUpdate, TokenOut
from linkpro.app import LinkPro
from linkpro.config import settings
from linkpro.errors import LinkProError
from linkpro.models import DailyCount, DashboardSnapshot, ProfileLink, SearchResult, User
from linkpro.platforms import PLATFORMS
from linkpro.scheduler.refresh import read_dashboard


class LinkRequest(BaseModel):
    """Request payload for adding a profile link."""
    platform: str
    url: str
    title: str
    description: Optional[str] = None


def create_app(linkpro: Optional[LinkPro] = None) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        linkpro (Optional[LinkPro]): Container to serve; a fresh one (store chosen
            from LINKPRO_STORAGE_BACKEND) when omitted.

    Returns:
        FastAPI: A fully configured application instance.

    Why an app factory?
        - Enables per-test isolation in pytest.
        - Encourages dependency injection and easy swapping of implementations.
        - Avoids accidental global state across workers/processes.
    """
    app = FastAPI(
        title="LinkPro",
        description="Link-in-bio profiles with tracked redirects and click analytics",
        docs_url="/docs",
    )
    log = logging.getLogger("linkpro")
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO)

    container = linkpro or LinkPro()
    app.state.linkpro = container
    log.info("LinkPro store backend: %s", type(container.store).__name__)

    @app.exception_handler(LinkProError)
    async def linkpro_error_handler(request: Request, exc: LinkProError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    # Health check
    @app.get("/health")
    def health():
        return {"status": "ok"}

    # ----------------------------------------------------------------
    # Auth
    # ----------------------------------------------------------------
    def _session_for(user: User) -> TokenOut:
        token = container.identity.issue_token(user)
        return TokenOut(access_token=token.value, user=user)

    @app.post("/auth/signup", response_model=TokenOut)
    def signup(req: SignupRequest) -> TokenOut:
        """
        Register a new user and return a session token.

        Errors:
            400 (missing field / short password), 409 (email or username taken).
        """
        user = container.identity.register(req.username, req.email, req.name, req.password)
        return _session_for(user)

    @app.post("/auth/login", response_model=TokenOut)
    def login(req: LoginRequest) -> TokenOut:
        """
        Errors:
            404 (no account with this email), 401 (wrong password).
        """
        user = container.identity.authenticate(req.email, req.password)
        return _session_for(user)

    @app.get("/auth/me", response_model=User)
    def me(user: User = Depends(get_current_user)) -> User:
        return user

    @app.put("/auth/me/theme", response_model=User)
    def update_theme(req: ThemeUpdate, user: User = Depends(get_current_user)) -> User:
        return container.identity.update_theme(user.id, req.theme)

    # ----------------------------------------------------------------
    # Owner links and dashboard
    # ----------------------------------------------------------------
    @app.get("/links", response_model=List[ProfileLink])
    def list_links(user: User = Depends(get_current_user)) -> List[ProfileLink]:
        return container.manager.links_of(user)

    @app.post("/links", response_model=ProfileLink)
    def add_link(req: LinkRequest, user: User = Depends(get_current_user)) -> ProfileLink:
        return container.manager.add_link(user, req.platform, req.url, req.title, req.description)

    @app.delete("/links/{link_id}")
    def delete_link(link_id: str, user: User = Depends(get_current_user)) -> Dict[str, Any]:
        container.manager.delete_link(user, link_id)
        return {"message": "Link deleted", "id": link_id}

    @app.get("/dashboard", response_model=DashboardSnapshot)
    def dashboard(user: User = Depends(get_current_user)) -> DashboardSnapshot:
        """
        One refresh tick for the caller: re-read on every request, never cached.
        """
        return read_dashboard(
            container.links,
            container.click_log,
            user.id,
            today=datetime.now(timezone.utc).date(),
            window_days=settings.DAILY_WINDOW,
            recent=settings.RECENT_ACTIVITY,
        )

    @app.get("/analytics/daily", response_model=List[DailyCount])
    def daily_clicks(
        days: int = Query(7, ge=1, le=366, description="Window size in days, ending today."),
        user: User = Depends(get_current_user),
    ) -> List[DailyCount]:
        ids = [link.id for link in container.links.list_by_owner(user.id)]
        return container.click_log.daily_counts(ids, window_days=days)

    @app.get("/search", response_model=List[SearchResult])
    def search(
        q: str = Query("", description="Name or username fragment."),
        user: User = Depends(get_current_user),
    ) -> List[SearchResult]:
        return container.manager.search(q)

    @app.get("/platforms")
    def platforms() -> List[Dict[str, str]]:
        return [
            {"name": p.name, "icon": p.icon, "color": p.color, "base_url": p.base_url}
            for p in PLATFORMS
        ]

    # ----------------------------------------------------------------
    # Tracked redirect (registered last: it matches any two-segment path)
    # ----------------------------------------------------------------
    @app.get("/{username}/{platform}")
    def redirect_link(username: str, platform: str, request: Request) -> Response:
        """
        Count a visit to `/{username}/{platform}` and send the visitor on.

        Browsers (Accept: text/html) get a 302 to the link URL; API clients get
        JSON with the URL, the updated click count and the countdown length the
        redirect page shows.
        """
        link = container.manager.visit(
            username,
            platform,
            user_agent=request.headers.get("user-agent"),
            referrer=request.headers.get("referer"),
        )
        if "text/html" in request.headers.get("accept", "").lower():
            return RedirectResponse(url=link.url, status_code=302)
        return JSONResponse(
            {
                "url": link.url,
                "title": link.title,
                "platform": link.platform,
                "clicks": link.clicks,
                "countdown": settings.REDIRECT_COUNTDOWN,
            }
        )

    return app


# `uvicorn main:app --reload` and `from main import app` continue to work.
app = create_app()
