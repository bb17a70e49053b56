"""
API module for the Task Tracker API
"""
