from .controller import AuthResult, SessionController, SessionState
from .guards import GuardDecision, guard

__all__ = ["AuthResult", "SessionController", "SessionState", "GuardDecision", "guard"]
