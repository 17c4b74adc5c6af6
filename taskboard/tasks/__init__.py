"""
Taskboard API - Tasks Module

Task CRUD, filtering and pagination.
"""

from taskboard.tasks.router import router as tasks_router

__all__ = ["tasks_router"]
