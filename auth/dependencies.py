"""
FastAPI dependency functions for authentication.

These can be used in routes with Depends() to protect endpoints.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from linkpro.models import User
from .service import authenticate_token

# Bearer authentication scheme; missing headers are reported by authenticate_token
security = HTTPBearer(auto_error=False)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> User:
    """
    Dependency that retrieves and validates the current user.

    Args:
        request (Request): Used to reach the app's LinkPro container.
        credentials (HTTPAuthorizationCredentials): Automatically provided by FastAPI.

    Returns:
        User: The authenticated user.
    """
    token = credentials.credentials if credentials else None
    return authenticate_token(request.app.state.linkpro.identity, token)
