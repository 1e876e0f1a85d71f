"""
Password Reset Use Case DTOs (Data Transfer Objects)

Response classes returned by the password reset use cases.
Field names are snake_case in Python and camelCase on the wire.
"""

from pydantic import BaseModel, Field


class RequestPasswordResetResponse(BaseModel):
    """Response for request password reset use case"""

    success: bool = True
    message: str
    expires_in_minutes: int = Field(serialization_alias="expiresInMinutes")


class ConfirmPasswordResetResponse(BaseModel):
    """Response for confirm password reset use case"""

    success: bool = True
    message: str
