"""Error response schemas for consistent API error formatting."""

from pydantic import BaseModel, ConfigDict, Field


class ErrorDetail(BaseModel):
    """Detail of a single error."""

    msg: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Error type identifier")

    model_config = ConfigDict(
        title="error.ErrorDetail",
        json_schema_extra={
            "example": {
                "msg": 'Activity with slug "pycon-2025" already exists',
                "type": "duplicate_error",
            }
        },
    )


class ErrorResponse(BaseModel):
    """Standardized error response format."""

    detail: list[ErrorDetail] = Field(..., description="List of error details")

    model_config = ConfigDict(
        title="error.ErrorResponse",
        json_schema_extra={
            "example": {
                "detail": [{"msg": "Activity not found", "type": "not_found_error"}],
            }
        },
    )
