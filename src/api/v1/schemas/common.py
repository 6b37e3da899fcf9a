"""Common Pydantic schemas shared across the API."""

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error body rendered by the exception handlers.

    Not-found reads also carry ``data: null``.
    """

    error_code: str
    message: str
    details: Any | None = None
    data: None = None


class SuccessResponse(BaseModel):
    """Acknowledgement with no payload."""

    success: bool = True
    message: str
