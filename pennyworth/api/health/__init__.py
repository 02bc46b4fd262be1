"""Service health endpoint."""
