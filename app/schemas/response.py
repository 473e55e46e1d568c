"""
app/schemas/response.py

Purpose: Error envelope returned by every failing endpoint
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.core.exceptions import EnrollEaseError


class ErrorResponse(BaseModel):
    """
    Body of every error reply. The browser shows `error` to the user and
    branches on `code`.
    """
    model_config = ConfigDict(json_schema_extra={
        "example": {
            "error": "Payment failed: Card declined",
            "code": "PAYMENT_FAILED",
            "details": {"error": {"code": "BAD_REQUEST_ERROR", "description": "Card declined"}},
        }
    })

    error: str = Field(..., description="User-facing message")
    code: str = Field(..., description="Machine-readable error code")
    details: Optional[Any] = Field(default=None, description="Extra context, e.g. missing profile fields")

    @classmethod
    def from_error(cls, exc: EnrollEaseError) -> "ErrorResponse":
        return cls(error=exc.message, code=exc.code, details=exc.details)
