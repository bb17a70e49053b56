"""
Utilities for the Task Tracker API
Errors, logging, security helpers and time helpers
"""
