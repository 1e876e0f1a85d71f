from typing import Callable, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field

from config import ApplicationConfig
from src.api.error import ClientError, ServerError
from src.app.services.authenticator import IAuthenticator
from src.app.services.notifier import INotifier
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    RequestPasswordResetUseCase,
    ConfirmPasswordResetUseCase,
    RequestPasswordResetResponse,
    ConfirmPasswordResetResponse,
)
from src.app.use_cases.auth import errors
from src.depends import (
    get_authenticator,
    get_clock,
    get_notifier,
    get_totp_settings,
    get_unit_of_work,
)
from src.domain.totp import TotpSettings
from src.libs.result import Error

router = APIRouter(prefix="/auth", tags=["Authentication"])

CLIENT_ERROR_STATUS = {
    errors.EMAIL_REQUIRED: status.HTTP_400_BAD_REQUEST,
    errors.INVALID_EMAIL_FORMAT: status.HTTP_400_BAD_REQUEST,
    errors.MISSING_FIELDS: status.HTTP_400_BAD_REQUEST,
    errors.INVALID_OTP_FORMAT: status.HTTP_400_BAD_REQUEST,
    errors.WEAK_PASSWORD: status.HTTP_400_BAD_REQUEST,
    errors.NO_PENDING_RESET: status.HTTP_400_BAD_REQUEST,
    errors.INVALID_OR_EXPIRED_OTP: status.HTTP_400_BAD_REQUEST,
    errors.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    errors.PROFILE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


def raise_for_error(error: Error):
    if error.code in CLIENT_ERROR_STATUS:
        raise ClientError(error, status_code=CLIENT_ERROR_STATUS[error.code])
    raise ServerError(error)


class SendOtpRequest(BaseModel):
    """
    Send OTP HTTP request payload

    Fields are optional so that missing values reach the use case and are
    reported with its error codes instead of FastAPI's 422.
    """

    email: Optional[str] = Field(default=None, description="Account email address")


class VerifyOtpRequest(BaseModel):
    """Verify OTP HTTP request payload"""

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = Field(default=None, description="Account email address")
    otp: Optional[str] = Field(default=None, description="6-digit code from the email")
    new_password: Optional[str] = Field(
        default=None, alias="newPassword", description="New password (min 8 chars)"
    )


@router.post(
    "/send-otp",
    status_code=status.HTTP_200_OK,
    response_model=RequestPasswordResetResponse,
)
async def send_otp(
    request: Optional[SendOtpRequest] = None,
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifier: INotifier = Depends(get_notifier),
    settings: TotpSettings = Depends(get_totp_settings),
    clock: Callable[[], float] = Depends(get_clock),
):
    """
    Request Password Reset OTP

    Creates the user's reset secret if none exists, derives the code for
    the current window and emails it. Repeating the request within the
    window resends the same code.

    Raises:
        - 400 Bad Request: Missing or malformed email
        - 404 Not Found: Unknown user or missing profile
        - 500 Internal Server Error: Lookup, storage or delivery failure
    """
    request = request or SendOtpRequest()

    use_case = RequestPasswordResetUseCase(
        uow,
        notifier,
        settings,
        timeout=ApplicationConfig.EXTERNAL_CALL_TIMEOUT_SECONDS,
        clock=clock,
    )
    result = await use_case.execute(request.email)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/verify-otp",
    status_code=status.HTTP_200_OK,
    response_model=ConfirmPasswordResetResponse,
)
async def verify_otp(
    request: Optional[VerifyOtpRequest] = None,
    uow: UnitOfWork = Depends(get_unit_of_work),
    authenticator: IAuthenticator = Depends(get_authenticator),
    settings: TotpSettings = Depends(get_totp_settings),
    clock: Callable[[], float] = Depends(get_clock),
):
    """
    Confirm Password Reset

    Verifies the OTP against the current window, sets the new password and
    clears the reset secret.

    Raises:
        - 400 Bad Request: Missing fields, bad OTP format, weak password,
          no pending reset, invalid or expired OTP
        - 404 Not Found: Unknown user or missing profile
        - 500 Internal Server Error: Lookup or password update failure
    """
    request = request or VerifyOtpRequest()

    use_case = ConfirmPasswordResetUseCase(
        uow,
        authenticator,
        settings,
        timeout=ApplicationConfig.EXTERNAL_CALL_TIMEOUT_SECONDS,
        clock=clock,
    )
    result = await use_case.execute(request.email, request.otp, request.new_password)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
