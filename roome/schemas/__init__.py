"""Pydantic schemas package."""

from roome.schemas.responses import ErrorDetail, ErrorResponse, MessageResponse

__all__ = ["ErrorDetail", "ErrorResponse", "MessageResponse"]
