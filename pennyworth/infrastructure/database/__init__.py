"""Async PostgreSQL access through SQLAlchemy."""
