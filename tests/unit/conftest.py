import pytest
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from src.domain.entities import User, UserProfile
from src.domain.totp import TotpSettings


@pytest.fixture
def settings():
    return TotpSettings(digits=6, step_seconds=600, window=0)


@pytest.fixture
def now():
    # 200s into window 2833333 (step 600), 400s before it rolls over
    return 1_700_000_000.0


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def secret():
    return "JBSWY3DPEHPK3PXPJBSWY3DPEHPK3PXP"


@pytest.fixture
def user():
    return User(
        id=uuid4(),
        email="user@example.com",
        password_hash="old_hashed_password",
    )


@pytest.fixture
def mock_uow(user):
    """Mock UnitOfWork with the user directory and profile/secret store"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_email = AsyncMock(return_value=user)

    uow.profiles = MagicMock()
    uow.profiles.get_by_user_id = AsyncMock(return_value=UserProfile(id=user.id))
    uow.profiles.get_secret = AsyncMock(return_value=None)
    uow.profiles.create_secret = AsyncMock(return_value=True)
    uow.profiles.clear_secret = AsyncMock(return_value=True)

    return uow


@pytest.fixture
def mock_notifier():
    notifier = MagicMock()
    notifier.send = AsyncMock()
    return notifier


@pytest.fixture
def mock_authenticator():
    authenticator = MagicMock()
    authenticator.update_password = AsyncMock()
    return authenticator
