"""Unit tests for LinkedAccountService."""

from uuid import uuid4

import pytest

from saver.domain.error import NotFoundError
from saver.domain.service import AuditService, LinkedAccountService
from saver.domain.value import AuditAction, LinkedAccountId, LinkMethod, UserId
from saver.persistence.repository.inmemory import (
    InMemoryAccountLinkingAuditRepository,
    InMemoryDatabase,
    InMemoryLinkedAccountRepository,
)


@pytest.fixture
def db() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def service(db: InMemoryDatabase) -> LinkedAccountService:
    return LinkedAccountService(
        InMemoryLinkedAccountRepository(db),
        AuditService(InMemoryAccountLinkingAuditRepository(db)),
    )


def actions(db: InMemoryDatabase) -> list[AuditAction]:
    return [entry.action for entry in db.audit]


class TestPropose:
    """Tests for LinkedAccountService.propose()."""

    @pytest.mark.asyncio
    async def test_unverified_proposal_is_audited(self, service, db):
        a, b = UserId(uuid4()), UserId(uuid4())

        link = await service.propose(a, b, LinkMethod.OAUTH, verified=False)

        assert link.verified is False
        assert link.metadata.requires_verification is True
        assert actions(db) == [AuditAction.LINK_PROPOSED]

    @pytest.mark.asyncio
    async def test_verified_proposal_records_auto_verification(self, service, db):
        a, b = UserId(uuid4()), UserId(uuid4())

        link = await service.propose(a, b, LinkMethod.OAUTH, verified=True)

        assert link.verified is True
        assert link.metadata.verified_at is not None
        assert actions(db) == [
            AuditAction.LINK_PROPOSED,
            AuditAction.LINK_AUTO_VERIFIED,
        ]

    @pytest.mark.asyncio
    async def test_existing_edge_is_reused_in_either_direction(self, service, db):
        a, b = UserId(uuid4()), UserId(uuid4())
        first = await service.propose(a, b, LinkMethod.OAUTH, verified=False)

        second = await service.propose(b, a, LinkMethod.MANUAL, verified=False)

        assert second.id == first.id
        assert len(db.linked_accounts) == 1


class TestVerify:
    """Tests for LinkedAccountService.verify()."""

    @pytest.mark.asyncio
    async def test_verify_marks_edge_and_audits(self, service, db):
        a, b = UserId(uuid4()), UserId(uuid4())
        link = await service.propose(a, b, LinkMethod.OAUTH, verified=False)

        verified = await service.verify(link, LinkMethod.EMAIL_VERIFICATION, performed_by=b)

        assert verified.verified is True
        assert verified.metadata.method == LinkMethod.EMAIL_VERIFICATION
        assert verified.metadata.verified_by == b
        assert actions(db)[-1] == AuditAction.LINK_VERIFIED

    @pytest.mark.asyncio
    async def test_verify_is_idempotent(self, service, db):
        a, b = UserId(uuid4()), UserId(uuid4())
        link = await service.propose(a, b, LinkMethod.OAUTH, verified=True)
        before = len(db.audit)

        again = await service.verify(link, LinkMethod.EMAIL_VERIFICATION)

        assert again == link
        assert len(db.audit) == before


class TestUnlink:
    """Tests for LinkedAccountService.unlink()."""

    @pytest.mark.asyncio
    async def test_unlink_deletes_edge(self, service, db):
        a, b = UserId(uuid4()), UserId(uuid4())
        link = await service.propose(a, b, LinkMethod.OAUTH, verified=True)

        await service.unlink(link, performed_by=a)

        assert db.linked_accounts == {}
        assert actions(db)[-1] == AuditAction.UNLINKED
        with pytest.raises(NotFoundError):
            await service.get_by_id(link.id)

    @pytest.mark.asyncio
    async def test_get_unknown_edge(self, service):
        with pytest.raises(NotFoundError):
            await service.get_by_id(LinkedAccountId(uuid4()))
