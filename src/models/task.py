"""
Task model for the Task Tracker API
Defines the task entity, its request schemas and its public representation
"""
from datetime import datetime, date
from typing import Optional, List
from enum import Enum
from uuid import uuid4
from sqlmodel import Field, SQLModel
from pydantic import field_validator

from ..utils.dates import utc_now


TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


class Priority(str, Enum):
    """Task priority levels"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    """Task status options"""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


def _clean_title(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Task title is required")
    if len(value) > TITLE_MAX_LENGTH:
        raise ValueError(f"Title must not exceed {TITLE_MAX_LENGTH} characters")
    return value


def _clean_description(value: str) -> str:
    value = value.strip()
    if len(value) > DESCRIPTION_MAX_LENGTH:
        raise ValueError(f"Description must not exceed {DESCRIPTION_MAX_LENGTH} characters")
    return value


class TaskBase(SQLModel):
    """Base model for task with common fields"""
    title: str = Field(max_length=TITLE_MAX_LENGTH)
    description: str = Field(default="", max_length=DESCRIPTION_MAX_LENGTH)
    status: TaskStatus = Field(default=TaskStatus.PENDING, index=True)
    priority: Priority = Field(default=Priority.MEDIUM, index=True)
    due_date: Optional[date] = Field(default=None)


class Task(TaskBase, table=True):
    """Task model for database table"""
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: str = Field(foreign_key="user.id", nullable=False, index=True)
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)


class TaskCreate(SQLModel):
    """Schema for creating a new task"""
    title: str
    description: Optional[str] = ""
    status: TaskStatus = TaskStatus.PENDING
    priority: Priority = Priority.MEDIUM
    due_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _clean_title(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> str:
        return _clean_description(v or "")


class TaskUpdate(SQLModel):
    """
    Schema for partially updating a task.

    Only fields present in the request body are applied. ``due_date`` may be
    sent as null to clear it; the other fields cannot be nulled.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[Priority] = None
    due_date: Optional[date] = None

    # Validators only run for fields present in the body, so None here means an explicit null.

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("Task title is required")
        return _clean_title(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("Description cannot be null")
        return _clean_description(v)

    @field_validator("status", "priority")
    @classmethod
    def validate_not_null(cls, v):
        if v is None:
            raise ValueError("Value cannot be null")
        return v

    def changes(self) -> dict:
        """Fields explicitly provided in the request."""
        return self.model_dump(exclude_unset=True)


class BulkStatusUpdate(SQLModel):
    """Schema for setting the status of several tasks at once"""
    task_ids: List[str]
    status: TaskStatus

    @field_validator("task_ids")
    @classmethod
    def validate_task_ids(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("task_ids must be a non-empty array")
        return v


class TaskPublic(TaskBase):
    """Public representation of task"""
    id: str
    user_id: str
    created_at: datetime
    updated_at: datetime
