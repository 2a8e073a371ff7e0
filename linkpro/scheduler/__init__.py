from .countdown import RedirectCountdown
from .refresh import RefreshScheduler

__all__ = ["RedirectCountdown", "RefreshScheduler"]
