"""
Password reset error codes and their client-safe messages.

Routes map codes to HTTP statuses; internal details travel separately in
Error.detail and are only logged.
"""

from typing import Optional

from src.libs.result import Error

EMAIL_REQUIRED = "EMAIL_REQUIRED"
INVALID_EMAIL_FORMAT = "INVALID_EMAIL_FORMAT"
MISSING_FIELDS = "MISSING_FIELDS"
INVALID_OTP_FORMAT = "INVALID_OTP_FORMAT"
WEAK_PASSWORD = "WEAK_PASSWORD"
USER_NOT_FOUND = "USER_NOT_FOUND"
PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
NO_PENDING_RESET = "NO_PENDING_RESET"
INVALID_OR_EXPIRED_OTP = "INVALID_OR_EXPIRED_OTP"
DIRECTORY_LOOKUP_FAILED = "DIRECTORY_LOOKUP_FAILED"
PROFILE_LOOKUP_FAILED = "PROFILE_LOOKUP_FAILED"
SECRET_PERSISTENCE_FAILED = "SECRET_PERSISTENCE_FAILED"
OTP_DELIVERY_FAILED = "OTP_DELIVERY_FAILED"
PASSWORD_UPDATE_FAILED = "PASSWORD_UPDATE_FAILED"
UNEXPECTED_ERROR = "UNEXPECTED_ERROR"

MESSAGES = {
    EMAIL_REQUIRED: "Email is required",
    INVALID_EMAIL_FORMAT: "Invalid email format",
    MISSING_FIELDS: "Email, OTP, and new password are required",
    INVALID_OTP_FORMAT: "Invalid OTP format. OTP must be {digits} digits.",
    WEAK_PASSWORD: "Password must be at least 8 characters long",
    USER_NOT_FOUND: "No account found with this email address",
    PROFILE_NOT_FOUND: "User profile not found",
    NO_PENDING_RESET: "No OTP request found. Please request a new OTP.",
    INVALID_OR_EXPIRED_OTP: "Invalid OTP or OTP has expired. Please request a new OTP.",
    DIRECTORY_LOOKUP_FAILED: "Error verifying email address",
    PROFILE_LOOKUP_FAILED: "Error accessing user profile",
    SECRET_PERSISTENCE_FAILED: "Failed to generate OTP. Please try again.",
    OTP_DELIVERY_FAILED: "Failed to send OTP email. Please try again.",
    PASSWORD_UPDATE_FAILED: "Failed to update password. Please try again.",
    UNEXPECTED_ERROR: "An unexpected error occurred. Please try again.",
}


def reset_error(code: str, detail: Optional[str] = None, **params) -> Error:
    return Error(code, MESSAGES[code].format(**params), detail=detail)
