from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.profile_repository import IProfileRepository
from src.domain.entities import UserProfile


class ProfileRepository(IProfileRepository):
    """
    Profile repository implementation using SQLModel

    Secret writes are single conditional UPDATE statements, so the check and
    the write happen atomically in the database.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user_id(self, user_id: UUID) -> Optional[UserProfile]:
        """Get the profile record of a user"""
        stmt = select(UserProfile).where(UserProfile.id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_secret(self, user_id: UUID) -> Optional[str]:
        """Read the secret column directly so a cached entity is never returned"""
        stmt = select(UserProfile.password_reset_secret).where(UserProfile.id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create_secret(self, user_id: UUID, secret: str) -> bool:
        """Store secret only if none exists"""
        stmt = (
            update(UserProfile)
            .where(UserProfile.id == user_id)
            .where(UserProfile.password_reset_secret.is_(None))
            .values(password_reset_secret=secret, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.exec(stmt)
        return result.rowcount == 1

    async def clear_secret(self, user_id: UUID, expected: Optional[str] = None) -> bool:
        """Clear the secret, optionally only if it still equals ``expected``"""
        stmt = (
            update(UserProfile)
            .where(UserProfile.id == user_id)
            .where(UserProfile.password_reset_secret.is_not(None))
            .values(password_reset_secret=None, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        if expected is not None:
            stmt = stmt.where(UserProfile.password_reset_secret == expected)

        result = await self.session.exec(stmt)
        if result.rowcount == 1:
            return True

        # Nothing updated: fine if there is no secret, a conflict if another one is stored
        return await self.get_secret(user_id) is None
