import logging
from datetime import datetime
from uuid import UUID

import bcrypt
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.services.authenticator import AuthenticatorError, IAuthenticator
from src.domain.entities import User, UserStatus

logger = logging.getLogger(__name__)


class BcryptAuthenticator(IAuthenticator):
    """Stores the new password as a bcrypt hash (cost factor 12) and commits it"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def update_password(self, user_id: UUID, new_password: str) -> None:
        user = await self.session.get(User, user_id)
        if user is None:
            raise AuthenticatorError(f"User {user_id} does not exist")
        if user.status == UserStatus.disabled:
            raise AuthenticatorError(f"User {user_id} is disabled")

        password_hash = bcrypt.hashpw(new_password.encode(), bcrypt.gensalt(12))
        user.password_hash = password_hash.decode()
        user.password_changed_at = datetime.utcnow()

        try:
            self.session.add(user)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise AuthenticatorError(f"Could not store new password for user {user_id}") from e
