from . import aggregator
from .click_log import ClickEventLog

__all__ = ["aggregator", "ClickEventLog"]
