import time
from typing import Callable

from fastapi import Depends
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.authenticator import BcryptAuthenticator
from src.adapter.services.smtp_notifier import SmtpNotifier
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.authenticator import IAuthenticator
from src.app.services.notifier import INotifier
from src.domain.totp import TotpSettings

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


# FastAPI caches dependencies per request, so the unit of work and the
# authenticator below share one session.
async def get_unit_of_work(session: AsyncSession = Depends(get_session)):
    yield SqlAlchemyUnitOfWork(session)


def get_authenticator(session: AsyncSession = Depends(get_session)) -> IAuthenticator:
    return BcryptAuthenticator(session)


def get_notifier() -> INotifier:
    return SmtpNotifier.from_config(ApplicationConfig)


def get_totp_settings() -> TotpSettings:
    return TotpSettings.from_config(ApplicationConfig)


def get_clock() -> Callable[[], float]:
    return time.time


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
