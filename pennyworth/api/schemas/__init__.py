"""Pydantic models describing response bodies."""
