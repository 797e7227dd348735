"""Core schemas for the application."""

from typing import List, Optional
from pydantic import BaseModel
from pydantic.alias_generators import to_pascal


class HealthCheck(BaseModel):
    """Schema for health check response."""
    service_name: str
    status: str


class WireModel(BaseModel):
    """Base for request/response bodies exchanged with PascalCase keys."""

    class Config:
        alias_generator = to_pascal
        populate_by_name = True
        from_attributes = True


class RequestModel(WireModel):
    """Request bodies reject keys they do not declare."""

    class Config:
        extra = "forbid"


class Message(WireModel):
    """Schema for a plain acknowledgement."""
    message: str


class ErrorResponse(BaseModel):
    """Schema for error responses."""
    message: str
    error: str
    details: Optional[List[dict]] = None
