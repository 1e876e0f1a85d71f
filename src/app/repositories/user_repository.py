from abc import ABC, abstractmethod
from typing import Optional

from src.domain.entities import User


class IUserRepository(ABC):
    """User directory interface - application layer"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address"""
        pass
