"""Error models for taiosd API."""

from pydantic import Field

from taios_library.models.base import CamelCaseModel


class ErrorResponse(CamelCaseModel):
    """Standard error response.

    Attributes:
        error: Error message
        detail: Optional additional details
    """

    error: str = Field(..., description="Error message")
    detail: str | None = Field(default=None, description="Additional error details")
