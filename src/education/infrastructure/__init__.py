"""
Education Infrastructure Layer
ORM models and repositories
"""
