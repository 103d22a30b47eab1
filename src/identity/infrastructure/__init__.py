"""
Identity Infrastructure Layer
ORM models and repositories
"""
