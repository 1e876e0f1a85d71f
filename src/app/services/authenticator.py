from abc import ABC, abstractmethod
from uuid import UUID


class AuthenticatorError(Exception):
    """Credential update failed"""


class IAuthenticator(ABC):
    """Changes a user's password - application layer"""

    @abstractmethod
    async def update_password(self, user_id: UUID, new_password: str) -> None:
        """
        Replace the user's password.

        Raises:
            AuthenticatorError: the password could not be changed
        """
        pass
