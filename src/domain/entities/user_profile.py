"""
UserProfile Entity

Per-user profile record holding the password reset secret.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Column, DateTime, Field, SQLModel


class UserProfile(SQLModel, table=True):
    """
    UserProfile entity - one row per user, keyed by the user's id.

    Business Rules:
    - password_reset_secret is the only reset state; its presence means a
      reset is pending
    - At most one secret per user; it is written only when absent and
      cleared after a successful reset
    - The OTP itself is never stored
    """

    __tablename__ = "user_profiles"

    id: UUID = Field(foreign_key="users.id", primary_key=True)

    password_reset_secret: Optional[str] = Field(default=None, max_length=64)

    updated_at: datetime = Field(
        default_factory=datetime.utcnow, sa_column=Column(DateTime)
    )
