"""
Route modules for the Task Tracker API
"""
from . import auth, tasks

__all__ = ["auth", "tasks"]
