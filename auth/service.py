"""
Core authentication logic for the API.

This module turns a bearer token into a LinkPro user, translating every
failure into a 401 so clients know to log in again.
"""

from typing import Optional

from fastapi import HTTPException, status

from linkpro.errors import LinkProError
from linkpro.identity.identity_store import IdentityStore
from linkpro.models import User


def authenticate_token(identity: IdentityStore, token: Optional[str]) -> User:
    """
    Resolve a bearer token to its user.

    Args:
        identity (IdentityStore): Identity store of the running app.
        token (Optional[str]): Raw token from the Authorization header.

    Returns:
        User: The authenticated user.

    Raises:
        HTTPException: If the token is missing, invalid, expired, or its user is gone (401).
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return identity.validate_token(token)
    except LinkProError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )
