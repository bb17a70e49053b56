"""
Task Tracker API
Multi-tenant task tracking backend with token-based authentication
"""
