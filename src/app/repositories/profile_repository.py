from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import UserProfile


class IProfileRepository(ABC):
    """
    Profile repository interface - application layer

    Also the secret store for password resets. Writes to the secret are
    conditional so concurrent requests fail cleanly instead of overwriting.
    """

    @abstractmethod
    async def get_by_user_id(self, user_id: UUID) -> Optional[UserProfile]:
        """Get the profile record of a user"""
        pass

    @abstractmethod
    async def get_secret(self, user_id: UUID) -> Optional[str]:
        """Get the pending reset secret, or None when no reset is pending"""
        pass

    @abstractmethod
    async def create_secret(self, user_id: UUID, secret: str) -> bool:
        """Store secret only if none exists; False when one is already present"""
        pass

    @abstractmethod
    async def clear_secret(self, user_id: UUID, expected: Optional[str] = None) -> bool:
        """
        Clear the secret. Clearing an absent secret succeeds.

        With ``expected``, clears only if the stored secret equals it and
        returns False when a different secret is present.
        """
        pass
