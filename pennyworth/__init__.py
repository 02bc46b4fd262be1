"""Pennyworth - template REST microservice backed by PostgreSQL.

Architecture Overview:
- **API Layer**: FastAPI/Starlette routing, handlers, responders and panic recovery
- **Core Layer**: Configuration, logging, validation, errors and the money type
- **Domain Layer**: The customer entity and its repository contract
- **Infrastructure Layer**: SQLAlchemy async persistence and alembic migrations

Dependencies are wired explicitly through ``pennyworth.core.environment``;
no component reaches for a global logger or database.
"""
