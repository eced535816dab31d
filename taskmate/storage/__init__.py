"""Storage backends."""

from .memory import TaskStore, UserStore

__all__ = ["TaskStore", "UserStore"]
