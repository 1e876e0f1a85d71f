from abc import ABC, abstractmethod


class NotifierError(Exception):
    """OTP delivery failed"""


class INotifier(ABC):
    """Delivers a reset code to its recipient - application layer"""

    @abstractmethod
    async def send(self, email: str, code: str, expires_in_minutes: int) -> None:
        """
        Deliver ``code`` to ``email``.

        Raises:
            NotifierError: the message could not be delivered
        """
        pass
