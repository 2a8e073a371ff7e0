"""
Pydantic schemas for request/response models in the auth module.
"""

from pydantic import BaseModel

from linkpro.models import User


class SignupRequest(BaseModel):
    """Schema for signup request payload."""
    username: str
    email: str
    password: str
    name: str


class LoginRequest(BaseModel):
    """Schema for login request payload."""
    email: str
    password: str


class TokenOut(BaseModel):
    """Schema for responses carrying a fresh session token."""
    access_token: str
    token_type: str = "bearer"
    user: User


class ThemeUpdate(BaseModel):
    theme: str
