"""
Session controller for LinkPro.

Responsibilities:
    - Restore a persisted session once at startup
    - Drive login / signup / logout through the identity store
    - Expose the current session state and user to every view
    - Notify subscribers (route guards, schedulers) on every transition

State machine:

    LOADING --start()--> AUTHENTICATED | ANONYMOUS
    ANONYMOUS --login/signup--> AUTHENTICATING --ok--> AUTHENTICATED
                                               --error--> ANONYMOUS (error set)
    AUTHENTICATED --logout--> ANONYMOUS

Failures never escape as exceptions from login/signup: they come back as an
`AuthResult` carrying the specific user-facing message, or a generic one when
the failure has none (unexpected errors are logged with their traceback).

LLM Prompt Example:
    "Show how to model an auth flow as an explicit state machine with
    observers instead of scattering loading flags across views."
"""

import enum
import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..errors import LinkProError, ValidationError
from ..identity.identity_store import IdentityStore
from ..models import SessionToken, User

log = logging.getLogger("linkpro.session")

# Shown when a failure has no user-facing message of its own
LOGIN_FAILED = "An error occurred during login. Please try again."
SIGNUP_FAILED = "An error occurred during registration."


class SessionState(enum.Enum):
    LOADING = "loading"
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class AuthResult:
    success: bool
    error: Optional[str] = None
    user: Optional[User] = None


Listener = Callable[[SessionState], None]


class SessionController:
    def __init__(self, identity: IdentityStore):
        self.identity = identity
        self.state = SessionState.LOADING
        self.user: Optional[User] = None
        self.token: Optional[SessionToken] = None
        self.error: Optional[str] = None
        self._lock = threading.RLock()
        self._listeners: List[Listener] = []
        self._started = False

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register `listener`; returns a function that unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _transition(self, state: SessionState) -> None:
        with self._lock:
            self.state = state
            listeners = list(self._listeners)
        for listener in listeners:
            listener(state)

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> SessionState:
        """Restore the persisted session; only the first call does anything."""
        with self._lock:
            if self._started:
                return self.state
            self._started = True
        user = self.identity.restore_session()
        with self._lock:
            self.user = user
        if user is not None:
            log.info("Restored session for %s", user.username)
        self._transition(SessionState.AUTHENTICATED if user else SessionState.ANONYMOUS)
        return self.state

    def _authenticated(self, user: User) -> AuthResult:
        token = self.identity.issue_token(user)
        self.identity.save_session(token)
        with self._lock:
            self.user = user
            self.token = token
            self.error = None
        self._transition(SessionState.AUTHENTICATED)
        return AuthResult(success=True, user=user)

    def _failed(self, message: str) -> AuthResult:
        with self._lock:
            self.user = None
            self.token = None
            self.error = message
        self._transition(SessionState.ANONYMOUS)
        return AuthResult(success=False, error=message)

    def login(self, email: str, password: str) -> AuthResult:
        self._transition(SessionState.AUTHENTICATING)
        try:
            user = self.identity.authenticate(email, password)
            result = self._authenticated(user)
        except LinkProError as exc:
            log.info("Login failed for %s: %s", email, exc.message)
            return self._failed(exc.message)
        except Exception:
            log.exception("Login crashed for %s", email)
            return self._failed(LOGIN_FAILED)
        log.info("User %s logged in", user.username)
        return result

    def signup(self, username: str, email: str, password: str, name: str) -> AuthResult:
        self._transition(SessionState.AUTHENTICATING)
        try:
            user = self.identity.register(username, email, name, password)
            result = self._authenticated(user)
        except LinkProError as exc:
            log.info("Signup failed for %s: %s", email, exc.message)
            return self._failed(exc.message)
        except Exception:
            log.exception("Signup crashed for %s", email)
            return self._failed(SIGNUP_FAILED)
        return result

    def logout(self) -> None:
        username = self.user.username if self.user else None
        self.identity.clear_session()
        with self._lock:
            self.user = None
            self.token = None
            self.error = None
        self._transition(SessionState.ANONYMOUS)
        log.info("User %s logged out", username)

    def set_theme(self, theme: str) -> User:
        """Persist the signed-in user's theme preference."""
        if self.user is None:
            raise ValidationError("You must be logged in to change the theme.")
        user = self.identity.update_theme(self.user.id, theme)
        with self._lock:
            self.user = user
        return user
