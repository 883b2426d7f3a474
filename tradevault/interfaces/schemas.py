"""
Pydantic schemas shared by every router.

Response models read domain dataclasses directly (`from_attributes`),
so enum fields serialize to their values and Decimals to strings.
"""

from pydantic import BaseModel, ConfigDict, Field

# Matches the NUMERIC(20, 8) columns; finer inputs would be rounded on storage.
MONEY_DIGITS = {"max_digits": 20, "decimal_places": 8}


class ResponseModel(BaseModel):
    """Base for response schemas built from domain objects."""

    model_config = ConfigDict(from_attributes=True)


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error: str
    detail: str | None = None


class HealthResponse(BaseModel):
    status: str
    version: str
    database: str


class MessageResponse(BaseModel):
    message: str


class StatusUpdateRequest(BaseModel):
    """Admin status change for a reviewable resource."""

    status: str = Field(..., min_length=1, max_length=20)
