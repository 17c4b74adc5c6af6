"""
Taskboard API - Authentication Module

Register/login with JWT authentication and the request auth gate.
"""

from taskboard.auth.router import router as auth_router
from taskboard.auth.dependencies import CurrentIdentity, get_current_identity

__all__ = ["auth_router", "CurrentIdentity", "get_current_identity"]
