"""
Taskboard API - Task Enums

Enums for task-related fields. Values are part of the wire contract.
"""

from enum import Enum


class TaskStatus(str, Enum):
    """Board columns a task moves through."""
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    DONE = "done"


class TaskPriority(str, Enum):
    """Task priority levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskType(str, Enum):
    """Work item kinds."""
    TASK = "Task"
    SUBTASK = "Subtask"
    BUG = "Bug"
    STORY = "Story"
    EPIC = "Epic"
