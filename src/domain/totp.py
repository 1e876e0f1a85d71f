"""
TOTP Engine

Derives and checks numeric one-time passwords from a base32 secret and a
point in time. Stateless: every call receives its TotpSettings explicitly.

The counter is floor(timestamp / step_seconds), so the step doubles as the
code's expiry. Both issuer and verifier must use the same step and a
synchronized clock; with window=0 a code is only accepted inside the exact
step it was derived for.
"""

import math
from dataclasses import dataclass

import pyotp
from pyotp.utils import strings_equal


class InvalidSecretError(ValueError):
    """Secret is empty or not valid base32"""


class TotpSettingsError(ValueError):
    """TOTP settings are out of range"""


@dataclass(frozen=True)
class TotpSettings:
    digits: int = 6
    step_seconds: int = 600
    window: int = 0

    @classmethod
    def from_config(cls, config) -> "TotpSettings":
        return cls(
            digits=config.OTP_DIGITS,
            step_seconds=config.OTP_STEP_SECONDS,
            window=config.OTP_WINDOW,
        )

    @property
    def expires_in_minutes(self) -> int:
        return self.step_seconds // 60


def _check_settings(settings: TotpSettings) -> None:
    if settings.digits <= 0 or settings.step_seconds <= 0 or settings.window < 0:
        raise TotpSettingsError(f"Invalid TOTP settings: {settings}")


def _hotp(secret: str, settings: TotpSettings) -> pyotp.HOTP:
    if not secret:
        raise InvalidSecretError("Secret is empty")
    hotp = pyotp.HOTP(secret, digits=settings.digits)
    try:
        key = hotp.byte_secret()
    except ValueError as e:
        raise InvalidSecretError("Secret is not valid base32") from e
    if not key:
        raise InvalidSecretError("Secret decodes to zero bytes")
    return hotp


def generate_secret(length: int = 32) -> str:
    """Random base32 secret; 32 characters carry 160 bits."""
    return pyotp.random_base32(length=length)


def counter_for(timestamp: float, settings: TotpSettings) -> int:
    _check_settings(settings)
    return math.floor(timestamp / settings.step_seconds)


def seconds_remaining(timestamp: float, settings: TotpSettings) -> int:
    next_boundary = (counter_for(timestamp, settings) + 1) * settings.step_seconds
    return math.ceil(next_boundary - timestamp)


def derive(secret: str, timestamp: float, settings: TotpSettings) -> str:
    """
    Derive the code for the step containing ``timestamp``.

    Raises:
        InvalidSecretError: secret is empty or not base32
        TotpSettingsError: settings are out of range
    """
    counter = counter_for(timestamp, settings)
    return _hotp(secret, settings).at(counter)


def matches(secret: str, candidate: str, timestamp: float, settings: TotpSettings) -> bool:
    """
    Check ``candidate`` against the code for the step containing ``timestamp``.

    Steps within ``settings.window`` on either side are accepted too; the
    default window of 0 accepts only the current step.
    """
    counter = counter_for(timestamp, settings)
    hotp = _hotp(secret, settings)
    candidate = str(candidate)
    for offset in range(-settings.window, settings.window + 1):
        if counter + offset < 0:
            continue
        if strings_equal(candidate, hotp.at(counter + offset)):
            return True
    return False
