"""
Authentication Use Cases

Password reset issuance and confirmation.
"""

from .request_password_reset_use_case import RequestPasswordResetUseCase
from .confirm_password_reset_use_case import ConfirmPasswordResetUseCase
from .dtos import (
    RequestPasswordResetResponse,
    ConfirmPasswordResetResponse,
)

__all__ = [
    # Use Cases
    "RequestPasswordResetUseCase",
    "ConfirmPasswordResetUseCase",
    # DTOs - Responses
    "RequestPasswordResetResponse",
    "ConfirmPasswordResetResponse",
]
