"""
Repair Shop Backend — Shared Response Schemas
==============================================

What:  Pydantic models shared by every resource: plain message bodies,
       the error envelope, and the health check.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Body of successful writes that return no representation."""
    message: str = Field(description="Human-readable success message")


class FieldErrorItem(BaseModel):
    field: str = Field(description="Request body field that failed a rule")
    message: str = Field(description="Rule violation message")


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for all API errors.

    Fields:
        error: Machine-readable error code (e.g. "validation_error", "conflict")
        message: Human-readable description for display to users
        errors: Field violations, present on validation failures
        details: Optional extra context (e.g. which value conflicted)
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "error": "conflict",
            "message": "Phone number 0711111111 already exists",
            "details": {"field": "phoneNumbers", "value": "0711111111"},
            "request_id": "550e8400"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    errors: Optional[List[FieldErrorItem]] = Field(default=None, description="Field rule violations")
    details: Optional[Dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
