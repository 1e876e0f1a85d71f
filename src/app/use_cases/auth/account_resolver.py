"""
Shared steps of both password reset flows: resolving the user and
their profile record by email.
"""

import asyncio
import logging
from typing import Optional

from email_validator import EmailNotValidError, validate_email

from src.libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import User
from . import errors

logger = logging.getLogger(__name__)


def is_valid_email(email: str) -> bool:
    """Syntactic check only, no DNS lookups and no special-use domain rejection"""
    try:
        validate_email(email, check_deliverability=False, globally_deliverable=False)
    except EmailNotValidError:
        return False
    return True


async def resolve_account(uow: UnitOfWork, email: str, timeout: float) -> Result[User]:
    """
    Find the user for ``email`` and make sure their profile record exists.

    Errors:
        - USER_NOT_FOUND / PROFILE_NOT_FOUND: nothing to reset
        - DIRECTORY_LOOKUP_FAILED / PROFILE_LOOKUP_FAILED: upstream fault or timeout
    """
    try:
        user: Optional[User] = await asyncio.wait_for(
            uow.users.get_by_email(email), timeout=timeout
        )
    except Exception as e:
        logger.error(f"Error finding user: {e!r}")
        return Return.err(errors.reset_error(errors.DIRECTORY_LOOKUP_FAILED, repr(e)))

    if user is None:
        return Return.err(errors.reset_error(errors.USER_NOT_FOUND))

    try:
        profile = await asyncio.wait_for(
            uow.profiles.get_by_user_id(user.id), timeout=timeout
        )
    except Exception as e:
        logger.error(f"Error fetching profile for user {user.id}: {e!r}")
        return Return.err(errors.reset_error(errors.PROFILE_LOOKUP_FAILED, repr(e)))

    if profile is None:
        return Return.err(errors.reset_error(errors.PROFILE_NOT_FOUND))

    return Return.ok(user)
