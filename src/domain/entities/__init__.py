"""
Password Reset Service Domain Entities

Each entity in its own file.
"""

from .enums import UserStatus
from .user import User
from .user_profile import UserProfile

__all__ = [
    # Enums
    "UserStatus",
    # Entities
    "User",
    "UserProfile",
]
