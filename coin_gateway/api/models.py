"""
API-specific data models for the coin gateway.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Model for error responses."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    error: Annotated[str, Field(description="Human-readable error message")]


class HealthResponse(BaseModel):
    """Model for the health check response."""

    message: str
    status: str
