"""
Identity store for LinkPro.

Responsibilities:
    - Register users and their credentials
    - Enforce email and username uniqueness (case-insensitive)
    - Authenticate email/password pairs
    - Issue, validate and persist session tokens
    - Look users up for the search and redirect views

Design notes:
    - Users live in the `users` collection keyed by id; credentials live apart
      in `credentials`, keyed 1:1 by user id.
    - Passwords are stored and compared as plain strings. This is a demo
      and is not meant to be secure.
    - The "current session" pointer is a single record in `session`;
      logout clears it rather than revoking anything.

LLM Prompt Example:
    "Explain why uniqueness checks and the insert must share one transaction
    to stay correct once two signups can race each other."
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from ..config import settings
from ..errors import (
    DuplicateEmail,
    DuplicateUsername,
    InvalidCredentials,
    LinkProError,
    NotFound,
    ValidationError,
)
from ..models import Credential, SessionToken, User
from ..storage.base import BaseStore, StoreTransaction, use_transaction
from .tokens import decode_token, encode_token

log = logging.getLogger("linkpro.identity")

THEMES = ("light", "dark")

# First path segments the app serves itself; a user with one of these names
# would have a shadowed `/{username}/{platform}` redirect.
RESERVED_USERNAMES = frozenset(
    {
        "analytics",
        "auth",
        "dashboard",
        "docs",
        "health",
        "links",
        "login",
        "openapi.json",
        "platforms",
        "redoc",
        "search",
        "signup",
    }
)


class IdentityStore:
    """
    Owns users, credentials and the current-session pointer.

    Args:
        store (BaseStore): Shared store instance.
        min_password_length (int): Minimum accepted password length.
        session_ttl (Optional[timedelta]): Token lifetime; None disables expiry.
        clock (Callable[[], datetime]): Source of "now" (injectable for tests).
    """

    def __init__(
        self,
        store: BaseStore,
        min_password_length: Optional[int] = None,
        session_ttl: Optional[timedelta] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.store = store
        self.min_password_length = min_password_length or settings.MIN_PASSWORD_LENGTH
        if session_ttl is None and settings.SESSION_TTL:
            session_ttl = timedelta(seconds=settings.SESSION_TTL)
        self.session_ttl = session_ttl
        self.clock = clock

    # ---------------------------------------------------------------------
    # Lookups
    # ---------------------------------------------------------------------
    def _users(self, txn: StoreTransaction) -> List[User]:
        return [User.model_validate(u) for u in txn.read("users").values()]

    def _find_by_email(self, txn: StoreTransaction, email: str) -> Optional[User]:
        wanted = email.strip().lower()
        for user in self._users(txn):
            if user.email.lower() == wanted:
                return user
        return None

    def _find_by_username(self, txn: StoreTransaction, username: str) -> Optional[User]:
        wanted = username.strip().lower()
        for user in self._users(txn):
            if user.username.lower() == wanted:
                return user
        return None

    def user_exists_by_email(self, email: str) -> bool:
        with self.store.transaction() as txn:
            return self._find_by_email(txn, email) is not None

    def username_exists(self, username: str) -> bool:
        with self.store.transaction() as txn:
            return self._find_by_username(txn, username) is not None

    def get_user(self, user_id: str, txn: Optional[StoreTransaction] = None) -> User:
        """Return the user with this id, or raise NotFound."""
        with use_transaction(self.store, txn) as t:
            raw = t.read("users").get(user_id)
        if raw is None:
            raise NotFound("User not found.")
        return User.model_validate(raw)

    def get_user_by_username(self, username: str, txn: Optional[StoreTransaction] = None) -> Optional[User]:
        with use_transaction(self.store, txn) as t:
            return self._find_by_username(t, username)

    def list_users(self) -> List[User]:
        """All users in registration order."""
        with self.store.transaction() as txn:
            return self._users(txn)

    def search(self, query: str) -> List[User]:
        """Users whose name or username contains `query` (case-insensitive)."""
        needle = (query or "").strip().lower()
        if not needle:
            return []
        return [
            u for u in self.list_users()
            if needle in u.name.lower() or needle in u.username.lower()
        ]

    # ---------------------------------------------------------------------
    # Registration / authentication
    # ---------------------------------------------------------------------
    def register(self, username: str, email: str, name: str, password: str) -> User:
        """
        Create a user and its credential.

        Rules (checked in this order):
            - all four fields present and non-blank
            - password at least `min_password_length` characters
            - username not one of RESERVED_USERNAMES (case-insensitive)
            - email not used by another user (case-insensitive)
            - username not used by another user (case-insensitive)

        Raises:
            ValidationError, DuplicateEmail, DuplicateUsername
        """
        if not all(field and field.strip() for field in (username, email, name, password)):
            raise ValidationError("All fields are required.")
        if len(password) < self.min_password_length:
            raise ValidationError(
                f"Password must be at least {self.min_password_length} characters long."
            )
        if username.strip().lower() in RESERVED_USERNAMES:
            raise ValidationError("This username is reserved. Please choose another one.")

        username, email, name = username.strip(), email.strip(), name.strip()
        with self.store.transaction() as txn:
            if self._find_by_email(txn, email) is not None:
                raise DuplicateEmail()
            if self._find_by_username(txn, username) is not None:
                raise DuplicateUsername()

            user = User(username=username, email=email, name=name, theme="light", created_at=self.clock())
            users = txn.read("users")
            users[user.id] = user.model_dump(mode="json")
            credentials = txn.read("credentials")
            credentials[user.id] = Credential(user_id=user.id, password=password).model_dump()
            txn.write("users", users)
            txn.write("credentials", credentials)

        log.info("Registered user %s (%s)", user.username, user.id)
        return user

    def authenticate(self, email: str, password: str) -> User:
        """
        Check an email/password pair.

        Raises:
            NotFound: No user has this email.
            InvalidCredentials: The stored password differs.
        """
        with self.store.transaction() as txn:
            user = self._find_by_email(txn, email or "")
            if user is None:
                raise NotFound("No account found with this email. Please register first.")
            stored = txn.read("credentials").get(user.id)
        if stored is None or stored.get("password") != password:
            raise InvalidCredentials("Invalid password. Please try again.")
        return user

    def update_theme(self, user_id: str, theme: str) -> User:
        if theme not in THEMES:
            raise ValidationError(f"Theme must be one of: {', '.join(THEMES)}.")
        with self.store.transaction() as txn:
            users = txn.read("users")
            if user_id not in users:
                raise NotFound("User not found.")
            users[user_id]["theme"] = theme
            txn.write("users", users)
            return User.model_validate(users[user_id])

    # ---------------------------------------------------------------------
    # Tokens and the persisted session pointer
    # ---------------------------------------------------------------------
    def issue_token(self, user: User, issued_at: Optional[datetime] = None) -> SessionToken:
        return encode_token(user, issued_at or self.clock())

    def validate_token(self, value: str, now: Optional[datetime] = None) -> User:
        """
        Resolve a token back to its user.

        Raises:
            InvalidCredentials: Malformed, tampered or expired token.
            NotFound: The token's user no longer exists.
        """
        claims = decode_token(value)
        if self.session_ttl is not None:
            try:
                issued_at = datetime.fromtimestamp(claims["iat"], tz=timezone.utc)
            except (OverflowError, OSError, ValueError) as exc:
                raise InvalidCredentials("Invalid session. Please log in again.") from exc
            if (now or self.clock()) - issued_at > self.session_ttl:
                raise InvalidCredentials("Your session has expired. Please log in again.")
        return self.get_user(claims["sub"])

    def save_session(self, token: SessionToken) -> None:
        with self.store.transaction() as txn:
            txn.write("session", {"token": token.value, "user_id": token.user_id})

    def clear_session(self) -> None:
        with self.store.transaction() as txn:
            txn.write("session", None)

    def restore_session(self) -> Optional[User]:
        """
        Return the user of the persisted session, if it is still valid.

        Never raises: a missing, stale or unreadable session yields None.
        """
        try:
            pointer = self.store.snapshot("session")
            if not isinstance(pointer, dict) or not isinstance(pointer.get("token"), str):
                return None
            return self.validate_token(pointer["token"])
        except LinkProError as exc:
            log.warning("Discarding persisted session: %s", exc.message)
            return None
