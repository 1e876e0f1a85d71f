"""
Confirm Password Reset Use Case

Verifies a password reset OTP, changes the password and invalidates the
user's reset secret so no code derived from it can be used again.
"""

import asyncio
import logging
import re
import time
from typing import Callable, Optional

from src.libs.result import Result, Return
from src.app.services.authenticator import IAuthenticator
from src.app.services.unit_of_work import UnitOfWork
from src.domain import totp
from src.domain.totp import TotpSettings
from . import errors
from .account_resolver import resolve_account
from .dtos import ConfirmPasswordResetResponse

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class ConfirmPasswordResetUseCase:
    """
    Use case for confirming a password reset with an OTP.

    Business Rules:
    - Email, OTP and new password are all required
    - OTP must be exactly `digits` ASCII digits
    - New password must be at least 8 characters
    - No stored secret means no reset is pending (distinct from a wrong code)
    - A wrong code and an engine fault produce the same error
    - The code is only valid inside the time window it was derived for
    - If the password update fails the secret is kept so the same code can
      be retried within its window
    - After a successful update the secret is cleared with a
      compare-and-swap; a failed clear is logged and the reset still succeeds
    """

    def __init__(
        self,
        uow: UnitOfWork,
        authenticator: IAuthenticator,
        settings: TotpSettings,
        timeout: float = 10.0,
        clock: Callable[[], float] = time.time,
    ):
        self.uow = uow
        self.authenticator = authenticator
        self.settings = settings
        self.timeout = timeout
        self.clock = clock
        self._otp_pattern = re.compile(rf"[0-9]{{{settings.digits}}}")

    def _validate_input(
        self, email: Optional[str], otp: Optional[str], new_password: Optional[str]
    ) -> Result[None]:
        if not email or not otp or not new_password:
            return Return.err(errors.reset_error(errors.MISSING_FIELDS))

        if not self._otp_pattern.fullmatch(otp):
            return Return.err(
                errors.reset_error(errors.INVALID_OTP_FORMAT, digits=self.settings.digits)
            )

        if len(new_password) < MIN_PASSWORD_LENGTH:
            return Return.err(errors.reset_error(errors.WEAK_PASSWORD))

        return Return.ok(None)

    async def execute(
        self, email: Optional[str], otp: Optional[str], new_password: Optional[str]
    ) -> Result[ConfirmPasswordResetResponse]:
        """
        Execute confirm password reset use case.

        Args:
            email: Email address of the account
            otp: Code received by email
            new_password: Password to set

        Returns:
            Result with ConfirmPasswordResetResponse, or Error

        Errors:
            - MISSING_FIELDS, INVALID_OTP_FORMAT, WEAK_PASSWORD: bad input
            - USER_NOT_FOUND, PROFILE_NOT_FOUND: unknown account
            - NO_PENDING_RESET: no secret stored for the user
            - INVALID_OR_EXPIRED_OTP: code does not match the current window
            - DIRECTORY_LOOKUP_FAILED, PROFILE_LOOKUP_FAILED: upstream fault
            - PASSWORD_UPDATE_FAILED: authenticator fault
            - UNEXPECTED_ERROR: anything else
        """
        validation = self._validate_input(email, otp, new_password)
        if validation.is_err():
            return Return.err(validation.error)

        try:
            return await self._confirm(email, otp, new_password)
        except Exception as e:
            logger.exception("Unexpected error while confirming password reset")
            return Return.err(errors.reset_error(errors.UNEXPECTED_ERROR, repr(e)))

    async def _confirm(
        self, email: str, otp: str, new_password: str
    ) -> Result[ConfirmPasswordResetResponse]:
        async with self.uow:
            account = await resolve_account(self.uow, email, self.timeout)
            if account.is_err():
                return Return.err(account.error)
            user = account.value

            try:
                secret = await asyncio.wait_for(
                    self.uow.profiles.get_secret(user.id), timeout=self.timeout
                )
            except Exception as e:
                logger.error(f"Error reading reset secret for user {user.id}: {e!r}")
                return Return.err(errors.reset_error(errors.PROFILE_LOOKUP_FAILED, repr(e)))

            if not secret:
                return Return.err(errors.reset_error(errors.NO_PENDING_RESET))

            try:
                is_valid = totp.matches(secret, otp, self.clock(), self.settings)
            except ValueError as e:
                logger.error(f"Error verifying TOTP for user {user.id}: {e!r}")
                is_valid = False

            if not is_valid:
                return Return.err(errors.reset_error(errors.INVALID_OR_EXPIRED_OTP))

            logger.info(f"OTP verified successfully for user {user.id}")

            try:
                await asyncio.wait_for(
                    self.authenticator.update_password(user.id, new_password),
                    timeout=self.timeout,
                )
            except Exception as e:
                # Secret stays so the same code can be retried within its window
                logger.error(f"Error updating password for user {user.id}: {e!r}")
                return Return.err(errors.reset_error(errors.PASSWORD_UPDATE_FAILED, repr(e)))

            logger.info(f"Password updated successfully for user {user.id}")

            await self._invalidate_secret(user.id, secret)

            return Return.ok(
                ConfirmPasswordResetResponse(
                    message="Password reset successful! You can now log in with your new password.",
                )
            )

    async def _invalidate_secret(self, user_id, secret: str) -> None:
        """Best effort: the password has already changed."""
        try:
            cleared = await asyncio.wait_for(
                self.uow.profiles.clear_secret(user_id, expected=secret),
                timeout=self.timeout,
            )
            await asyncio.wait_for(self.uow.commit(), timeout=self.timeout)
        except Exception as e:
            logger.warning(
                f"Could not clear reset secret for user {user_id}, "
                f"but password was updated: {e!r}"
            )
            return

        if cleared:
            logger.info(f"Password reset secret removed for user {user_id}")
        else:
            logger.warning(
                f"Reset secret for user {user_id} was replaced concurrently and not cleared"
            )
