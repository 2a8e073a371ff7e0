from .link_repository import LinkRepository
from .link_manager import LinkManager

__all__ = ["LinkRepository", "LinkManager"]
