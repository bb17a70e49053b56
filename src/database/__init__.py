"""
Database module for the Task Tracker API
"""
from .database import get_engine, get_session, create_db_and_tables, build_engine

__all__ = ["get_engine", "get_session", "create_db_and_tables", "build_engine"]
