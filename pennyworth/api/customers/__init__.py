"""Customer endpoints."""
