"""
User Entity

The user directory: identity, email and credential.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from .enums import UserStatus


class User(SQLModel, table=True):
    """
    User entity - resolved by email during a password reset.

    Business Rules:
    - Email must be unique across all users
    - Password stored as bcrypt hash (cost factor 12)
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    status: UserStatus = Field(default=UserStatus.active)

    # Timestamps
    created_at: datetime = Field(
        default_factory=lambda: datetime.utcnow(), sa_column=Column(DateTime)
    )
    password_changed_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )
