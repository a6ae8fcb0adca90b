"""
Database models for the task-list service.

Architecture: User → Todo (single flat ownership relation).
"""

from tasklist.models.base import Base
from tasklist.models.todo import DEFAULT_TODO_STATUS, Todo
from tasklist.models.user import User

__all__ = [
    "Base",
    "User",
    "Todo",
    "DEFAULT_TODO_STATUS",
]
