"""Taskboard API: task tracking service with JWT authentication."""
