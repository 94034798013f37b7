"""Mock persistence providers for testing."""

from dishka import Scope, provide

from saver.domain.repository import (
    AccountLinkingAuditRepository,
    LinkedAccountRepository,
    UserRepository,
    VerificationCodeRepository,
)
from saver.persistence.repository.inmemory import (
    InMemoryAccountLinkingAuditRepository,
    InMemoryDatabase,
    InMemoryLinkedAccountRepository,
    InMemoryUserRepository,
    InMemoryVerificationCodeRepository,
)
from saver.util.di.infrastructure.persistence import PersistenceProvider


class MockPersistenceProvider(PersistenceProvider):
    """Mock persistence provider using in-memory repositories.

    One InMemoryDatabase per container, so requests served by the same
    container (and the scopes a test opens) see each other's writes. Each
    test builds its own container.
    """

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_database(self) -> InMemoryDatabase:
        """Provide the shared in-memory tables."""
        return InMemoryDatabase()

    @provide(scope=Scope.REQUEST)
    def get_user_repository(self, db: InMemoryDatabase) -> UserRepository:
        """Provide in-memory user repository."""
        return InMemoryUserRepository(db)

    @provide(scope=Scope.REQUEST)
    def get_linked_account_repository(
        self, db: InMemoryDatabase
    ) -> LinkedAccountRepository:
        """Provide in-memory graph store."""
        return InMemoryLinkedAccountRepository(db)

    @provide(scope=Scope.REQUEST)
    def get_verification_code_repository(
        self, db: InMemoryDatabase
    ) -> VerificationCodeRepository:
        """Provide in-memory verification code repository."""
        return InMemoryVerificationCodeRepository(db)

    @provide(scope=Scope.REQUEST)
    def get_audit_repository(
        self, db: InMemoryDatabase
    ) -> AccountLinkingAuditRepository:
        """Provide in-memory audit repository."""
        return InMemoryAccountLinkingAuditRepository(db)
