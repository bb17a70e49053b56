"""
Services module for the Task Tracker API
Contains business logic layer for the application
"""
from .task_service import TaskService
from .task_query_service import TaskQueryService, TaskQuery, TaskListResult, TaskStats
from .user_service import UserService
from .token_service import TokenService, IdentityClaims
from .auth_service import AuthService
from .email_service import EmailService
from .oauth_service import GoogleOAuthClient, OAuthError

__all__ = [
    "TaskService",
    "TaskQueryService",
    "TaskQuery",
    "TaskListResult",
    "TaskStats",
    "UserService",
    "TokenService",
    "IdentityClaims",
    "AuthService",
    "EmailService",
    "GoogleOAuthClient",
    "OAuthError",
]
