"""Multi-user task-list service with token authentication."""

__version__ = "0.1.0"
