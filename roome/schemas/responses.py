"""Standard API response schemas."""

from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Error detail in response."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    field: str | None = Field(None, description="Field that caused the error")
    details: dict[str, Any] | None = Field(None, description="Additional error details")


class ErrorResponse(BaseModel):
    """Standard error response envelope."""

    error: ErrorDetail


class MessageResponse(BaseModel):
    """Simple message response."""

    message: str


class StatusResponse(BaseModel):
    """Status response with optional details."""

    status: str
    message: str | None = None
    details: dict[str, Any] | None = None
