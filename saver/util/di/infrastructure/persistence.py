"""Persistence infrastructure providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
import logfire
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from saver.config import Settings
from saver.domain.repository import (
    AccountLinkingAuditRepository,
    LinkedAccountRepository,
    UserRepository,
    VerificationCodeRepository,
)
from saver.persistence.database import create_engine, create_session_factory
from saver.persistence.repository import (
    PostgresAccountLinkingAuditRepository,
    PostgresLinkedAccountRepository,
    PostgresUserRepository,
    PostgresVerificationCodeRepository,
)
from saver.util.di.base import ProviderBase
from saver.util.observability import instrument_sqlalchemy


class PersistenceProvider(ProviderBase):
    """Persistence component base."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """Production persistence provider using PostgreSQL."""

    __is_mock__ = False

    scope = Scope.APP

    @provide(scope=Scope.APP)
    async def get_engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        """Provide database engine, disposed when the container closes."""
        engine = create_engine(settings)
        instrument_sqlalchemy(engine)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def get_session_factory(
        self, engine: AsyncEngine
    ) -> async_sessionmaker[AsyncSession]:
        """Provide session factory."""
        return create_session_factory(engine)

    @provide(scope=Scope.REQUEST)
    async def get_session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterator[AsyncSession]:
        """Provide database session for request scope.

        The session is committed at the end of the request if no exception
        occurred, or rolled back if one was raised.
        """
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception as e:
                logfire.warn("Session rollback", error=str(e))
                await session.rollback()
                raise

    @provide(scope=Scope.REQUEST)
    def get_user_repository(self, session: AsyncSession) -> UserRepository:
        """Provide User repository."""
        return PostgresUserRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_linked_account_repository(
        self, session: AsyncSession
    ) -> LinkedAccountRepository:
        """Provide linked-account graph store."""
        return PostgresLinkedAccountRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_verification_code_repository(
        self, session: AsyncSession
    ) -> VerificationCodeRepository:
        """Provide VerificationCode repository."""
        return PostgresVerificationCodeRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_audit_repository(
        self, session: AsyncSession
    ) -> AccountLinkingAuditRepository:
        """Provide account linking audit repository."""
        return PostgresAccountLinkingAuditRepository(session)
