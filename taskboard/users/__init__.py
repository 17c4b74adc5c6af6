"""
Taskboard API - Users Module

Own-profile read/update and the user directory used for task assignment.
"""

from taskboard.users.router import router as users_router

__all__ = ["users_router"]
