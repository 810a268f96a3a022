"""Common Pydantic schemas."""
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from ..core.auth import utcnow


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = {
        "from_attributes": True,
        "validate_assignment": True,
    }


class ErrorResponse(BaseSchema):
    """Error response schema."""

    error: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Error code")
    details: Dict[str, Any] = Field(default_factory=dict, description="Error details")
    timestamp: datetime = Field(default_factory=utcnow)


class SuccessResponse(BaseSchema):
    """Generic success response."""

    success: bool = Field(True, description="Success status")
    message: str = Field(..., description="Success message")


class HealthResponse(BaseSchema):
    """Health check response."""

    status: str = Field(..., description="Overall health status")
    version: str = Field(..., description="Application version")
    timestamp: datetime = Field(default_factory=utcnow)
