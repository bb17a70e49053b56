"""
Models module for the Task Tracker API
Contains all database models and their request/response schemas
"""
from sqlmodel import SQLModel
from .user import (
    User,
    AuthProvider,
    UserCreate,
    UserLogin,
    UserPublic,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    ChangePasswordRequest,
    ExternalProfile,
)
from .task import Task, TaskCreate, TaskUpdate, TaskPublic, BulkStatusUpdate, Priority, TaskStatus

__all__ = [
    "SQLModel",
    "User",
    "AuthProvider",
    "UserCreate",
    "UserLogin",
    "UserPublic",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "ChangePasswordRequest",
    "ExternalProfile",
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskPublic",
    "BulkStatusUpdate",
    "Priority",
    "TaskStatus",
]
