"""
Unit tests for ConfirmPasswordResetUseCase

Tests all business logic with mocked dependencies.
"""
import pytest

from src.app.services.authenticator import AuthenticatorError
from src.app.use_cases.auth.confirm_password_reset_use_case import ConfirmPasswordResetUseCase
from src.domain import totp

NEW_PASSWORD = "NewPass123"


@pytest.fixture
def use_case(mock_uow, mock_authenticator, settings, clock):
    return ConfirmPasswordResetUseCase(mock_uow, mock_authenticator, settings, clock=clock)


@pytest.fixture
def pending_secret(mock_uow, secret):
    mock_uow.profiles.get_secret.return_value = secret
    return secret


@pytest.fixture
def valid_otp(pending_secret, settings, now):
    return totp.derive(pending_secret, now, settings)


@pytest.mark.asyncio
async def test_successful_password_reset(
    use_case, mock_uow, mock_authenticator, user, pending_secret, valid_otp
):
    """Correct code: password changed, secret cleared with compare-and-swap"""
    # Act
    result = await use_case.execute("user@example.com", valid_otp, NEW_PASSWORD)

    # Assert
    assert result.is_ok()
    assert result.value.success is True
    assert "Password reset successful" in result.value.message

    mock_authenticator.update_password.assert_called_once_with(user.id, NEW_PASSWORD)
    mock_uow.profiles.clear_secret.assert_called_once_with(user.id, expected=pending_secret)
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "email, otp, new_password",
    [
        (None, "123456", NEW_PASSWORD),
        ("user@example.com", None, NEW_PASSWORD),
        ("user@example.com", "123456", None),
        ("", "", ""),
    ],
)
async def test_missing_fields(use_case, mock_uow, email, otp, new_password):
    result = await use_case.execute(email, otp, new_password)

    assert result.is_err()
    assert result.error.code == "MISSING_FIELDS"
    mock_uow.users.get_by_email.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("otp", ["12a456", "12345", "1234567", " 12345", "123456\n", "١٢٣٤٥٦"])
async def test_bad_otp_format(use_case, mock_uow, otp):
    result = await use_case.execute("user@example.com", otp, NEW_PASSWORD)

    assert result.is_err()
    assert result.error.code == "INVALID_OTP_FORMAT"
    assert result.error.message == "Invalid OTP format. OTP must be 6 digits."
    mock_uow.users.get_by_email.assert_not_called()


@pytest.mark.asyncio
async def test_weak_password_rejected_even_with_correct_code(
    use_case, mock_uow, mock_authenticator, valid_otp
):
    result = await use_case.execute("user@example.com", valid_otp, "short1")

    assert result.is_err()
    assert result.error.code == "WEAK_PASSWORD"
    mock_uow.users.get_by_email.assert_not_called()
    mock_authenticator.update_password.assert_not_called()


@pytest.mark.asyncio
async def test_password_of_exactly_eight_characters_accepted(use_case, valid_otp):
    result = await use_case.execute("user@example.com", valid_otp, "12345678")

    assert result.is_ok()


@pytest.mark.asyncio
async def test_user_not_found(use_case, mock_uow, mock_authenticator):
    mock_uow.users.get_by_email.return_value = None

    result = await use_case.execute("nobody@example.com", "123456", NEW_PASSWORD)

    assert result.is_err()
    assert result.error.code == "USER_NOT_FOUND"
    mock_authenticator.update_password.assert_not_called()


@pytest.mark.asyncio
async def test_profile_not_found(use_case, mock_uow):
    mock_uow.profiles.get_by_user_id.return_value = None

    result = await use_case.execute("user@example.com", "123456", NEW_PASSWORD)

    assert result.is_err()
    assert result.error.code == "PROFILE_NOT_FOUND"


@pytest.mark.asyncio
async def test_directory_fault(use_case, mock_uow):
    mock_uow.users.get_by_email.side_effect = RuntimeError("timeout talking to directory")

    result = await use_case.execute("user@example.com", "123456", NEW_PASSWORD)

    assert result.is_err()
    assert result.error.code == "DIRECTORY_LOOKUP_FAILED"
    assert result.error.message == "Error verifying email address"
    assert "timeout" in result.error.detail


@pytest.mark.asyncio
async def test_no_pending_reset(use_case, mock_uow, mock_authenticator):
    """No secret stored: distinct error from a wrong code"""
    mock_uow.profiles.get_secret.return_value = None

    result = await use_case.execute("user@example.com", "123456", NEW_PASSWORD)

    assert result.is_err()
    assert result.error.code == "NO_PENDING_RESET"
    mock_authenticator.update_password.assert_not_called()


@pytest.mark.asyncio
async def test_wrong_code(use_case, mock_uow, mock_authenticator, valid_otp):
    wrong_otp = f"{(int(valid_otp) + 1) % 1_000_000:06d}"

    result = await use_case.execute("user@example.com", wrong_otp, NEW_PASSWORD)

    assert result.is_err()
    assert result.error.code == "INVALID_OR_EXPIRED_OTP"
    mock_authenticator.update_password.assert_not_called()
    mock_uow.profiles.clear_secret.assert_not_called()


@pytest.mark.asyncio
async def test_code_from_previous_window_is_expired(
    use_case, mock_authenticator, pending_secret, settings, now
):
    old_otp = totp.derive(pending_secret, now - settings.step_seconds, settings)

    result = await use_case.execute("user@example.com", old_otp, NEW_PASSWORD)

    assert result.is_err()
    assert result.error.code == "INVALID_OR_EXPIRED_OTP"
    mock_authenticator.update_password.assert_not_called()


@pytest.mark.asyncio
async def test_engine_fault_looks_like_wrong_code(use_case, mock_uow, mock_authenticator, valid_otp):
    """A malformed stored secret yields the same error as a wrong code"""
    wrong = await use_case.execute(
        "user@example.com", f"{(int(valid_otp) + 1) % 1_000_000:06d}", NEW_PASSWORD
    )

    mock_uow.profiles.get_secret.return_value = "not base32!"
    fault = await use_case.execute("user@example.com", valid_otp, NEW_PASSWORD)

    assert fault.is_err()
    assert fault.error == wrong.error
    mock_authenticator.update_password.assert_not_called()


@pytest.mark.asyncio
async def test_password_update_failure_keeps_secret(
    use_case, mock_uow, mock_authenticator, valid_otp
):
    """Authenticator fault: secret is kept so the same code can be retried"""
    mock_authenticator.update_password.side_effect = AuthenticatorError("db down")

    result = await use_case.execute("user@example.com", valid_otp, NEW_PASSWORD)

    assert result.is_err()
    assert result.error.code == "PASSWORD_UPDATE_FAILED"
    assert result.error.message == "Failed to update password. Please try again."
    mock_uow.profiles.clear_secret.assert_not_called()

    # Retry with the same code inside the window succeeds
    mock_authenticator.update_password.side_effect = None
    retry = await use_case.execute("user@example.com", valid_otp, NEW_PASSWORD)
    assert retry.is_ok()


@pytest.mark.asyncio
async def test_clear_failure_is_not_fatal(use_case, mock_uow, mock_authenticator, valid_otp):
    """Password already changed: a failed invalidation still reports success"""
    mock_uow.profiles.clear_secret.side_effect = RuntimeError("write failed")

    result = await use_case.execute("user@example.com", valid_otp, NEW_PASSWORD)

    assert result.is_ok()
    mock_authenticator.update_password.assert_called_once()


@pytest.mark.asyncio
async def test_lost_compare_and_swap_is_not_fatal(use_case, mock_uow, valid_otp):
    mock_uow.profiles.clear_secret.return_value = False

    result = await use_case.execute("user@example.com", valid_otp, NEW_PASSWORD)

    assert result.is_ok()


@pytest.mark.asyncio
async def test_second_verification_after_success_has_no_pending_reset(
    use_case, mock_uow, pending_secret, valid_otp
):
    """Once cleared, the same code in the same window cannot be reused"""
    stored = {"secret": pending_secret}

    async def get_secret(user_id):
        return stored["secret"]

    async def clear_secret(user_id, expected=None):
        stored["secret"] = None
        return True

    mock_uow.profiles.get_secret.side_effect = get_secret
    mock_uow.profiles.clear_secret.side_effect = clear_secret

    first = await use_case.execute("user@example.com", valid_otp, NEW_PASSWORD)
    second = await use_case.execute("user@example.com", valid_otp, NEW_PASSWORD)

    assert first.is_ok()
    assert second.is_err()
    assert second.error.code == "NO_PENDING_RESET"
