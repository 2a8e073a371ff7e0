"""
linkpro package initializer.
"""

from . import analytics
from . import identity
from . import manager
from . import scheduler
from . import session
from . import storage
from .app import LinkPro

__all__ = ["analytics", "identity", "manager", "scheduler", "session", "storage", "LinkPro"]
