"""
Identity Application Layer
Authentication and user-management services
"""
