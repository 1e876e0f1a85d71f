"""
Request Password Reset Use Case

Issues a time-windowed OTP for a password reset and hands it to the notifier.
Only the per-user secret is persisted; the OTP is derived on demand.
"""

import asyncio
import logging
import time
from typing import Callable, Optional
from uuid import UUID

from src.libs.result import Result, Return
from src.app.services.notifier import INotifier
from src.app.services.unit_of_work import UnitOfWork
from src.domain import totp
from src.domain.totp import TotpSettings
from . import errors
from .account_resolver import is_valid_email, resolve_account
from .dtos import RequestPasswordResetResponse

logger = logging.getLogger(__name__)


class RequestPasswordResetUseCase:
    """
    Use case for requesting a password reset OTP.

    Business Rules:
    - Email is checked syntactically before any lookup
    - A secret is created only when the user has none; an existing secret is
      reused so a resend yields the same code within the same window
    - Secret creation is conditional: if a concurrent request stored one
      first, that secret is used instead
    - The secret is committed before the code is delivered
    - A delivery failure is reported but leaves the secret in place, so a
      retry resends a code derived from the same secret
    - The code is never logged or returned
    """

    def __init__(
        self,
        uow: UnitOfWork,
        notifier: INotifier,
        settings: TotpSettings,
        timeout: float = 10.0,
        clock: Callable[[], float] = time.time,
    ):
        self.uow = uow
        self.notifier = notifier
        self.settings = settings
        self.timeout = timeout
        self.clock = clock

    async def execute(self, email: Optional[str]) -> Result[RequestPasswordResetResponse]:
        """
        Execute request password reset use case.

        Args:
            email: Email address of the account to reset

        Returns:
            Result with RequestPasswordResetResponse, or Error

        Errors:
            - EMAIL_REQUIRED, INVALID_EMAIL_FORMAT: bad input
            - USER_NOT_FOUND, PROFILE_NOT_FOUND: nothing to reset
            - DIRECTORY_LOOKUP_FAILED, PROFILE_LOOKUP_FAILED: upstream fault
            - SECRET_PERSISTENCE_FAILED: secret could not be stored
            - OTP_DELIVERY_FAILED: notifier fault
            - UNEXPECTED_ERROR: anything else
        """
        if not email or not email.strip():
            return Return.err(errors.reset_error(errors.EMAIL_REQUIRED))

        if not is_valid_email(email):
            return Return.err(errors.reset_error(errors.INVALID_EMAIL_FORMAT))

        try:
            return await self._issue(email)
        except Exception as e:
            logger.exception("Unexpected error while issuing password reset OTP")
            return Return.err(errors.reset_error(errors.UNEXPECTED_ERROR, repr(e)))

    async def _issue(self, email: str) -> Result[RequestPasswordResetResponse]:
        async with self.uow:
            account = await resolve_account(self.uow, email, self.timeout)
            if account.is_err():
                return Return.err(account.error)
            user = account.value

            secret_result = await self._get_or_create_secret(user.id)
            if secret_result.is_err():
                return Return.err(secret_result.error)

            now = self.clock()
            code = totp.derive(secret_result.value, now, self.settings)
            logger.debug(
                f"Derived reset OTP for user {user.id}, "
                f"{totp.seconds_remaining(now, self.settings)}s left in window"
            )

            try:
                await asyncio.wait_for(
                    self.notifier.send(email, code, self.settings.expires_in_minutes),
                    timeout=self.timeout,
                )
            except Exception as e:
                logger.error(f"Error sending OTP email to user {user.id}: {e!r}")
                return Return.err(errors.reset_error(errors.OTP_DELIVERY_FAILED, repr(e)))

            logger.info(f"Password reset OTP sent to user {user.id}")

            return Return.ok(
                RequestPasswordResetResponse(
                    message=f"OTP sent to {email}. Please check your inbox.",
                    expires_in_minutes=self.settings.expires_in_minutes,
                )
            )

    async def _get_or_create_secret(self, user_id: UUID) -> Result[str]:
        try:
            secret = await asyncio.wait_for(
                self.uow.profiles.get_secret(user_id), timeout=self.timeout
            )
        except Exception as e:
            logger.error(f"Error reading reset secret for user {user_id}: {e!r}")
            return Return.err(errors.reset_error(errors.PROFILE_LOOKUP_FAILED, repr(e)))

        if secret:
            return Return.ok(secret)

        new_secret = totp.generate_secret()
        try:
            created = await asyncio.wait_for(
                self.uow.profiles.create_secret(user_id, new_secret), timeout=self.timeout
            )
            await asyncio.wait_for(self.uow.commit(), timeout=self.timeout)
            if created:
                logger.info(f"Generated new password reset secret for user {user_id}")
                return Return.ok(new_secret)

            # Lost the race to a concurrent request; use the secret it stored
            secret = await asyncio.wait_for(
                self.uow.profiles.get_secret(user_id), timeout=self.timeout
            )
        except Exception as e:
            logger.error(f"Error storing reset secret for user {user_id}: {e!r}")
            return Return.err(errors.reset_error(errors.SECRET_PERSISTENCE_FAILED, repr(e)))

        if not secret:
            return Return.err(
                errors.reset_error(
                    errors.SECRET_PERSISTENCE_FAILED,
                    "secret was cleared by a concurrent request",
                )
            )

        logger.info(f"Reusing reset secret stored concurrently for user {user_id}")
        return Return.ok(secret)
