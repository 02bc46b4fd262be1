"""Error response bodies.

Every error the service reports has the shape
``{"error": {"message": ..., "validation_errors": {...}}}`` where
``validation_errors`` is only present for field validation failures.
"""

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """The error object of an error response."""

    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["resource not found", "request contains invalid fields"],
    )

    validation_errors: dict[str, str] | None = Field(
        default=None,
        description="Message of the first failing rule for each invalid field",
        examples=[{"username": "cannot be blank"}],
    )


class ErrorResponse(BaseModel):
    """Standardized error response model for API errors."""

    error: ErrorDetail

    def to_content(self) -> dict[str, object]:
        """Return the body as plain data, omitting unset optional fields."""
        return self.model_dump(mode="json", exclude_none=True)
