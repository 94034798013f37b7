"""Linked account domain service."""

from uuid import uuid4

import logfire

from saver.domain.error import NotFoundError
from saver.domain.model.common import utc_now
from saver.domain.model.linked_account import LinkedAccount, LinkMetadata
from saver.domain.repository.linked_account import LinkedAccountRepository
from saver.domain.value import (
    AuditAction,
    LinkedAccountId,
    LinkMethod,
    ProviderTrust,
    UserId,
)

from .audit_service import AuditService
from .base import Service


class LinkedAccountService(Service):
    """Creates, verifies and removes edges, auditing every transition."""

    def __init__(
        self,
        linked_account_repository: LinkedAccountRepository,
        audit_service: AuditService,
    ) -> None:
        """Initialize linked account service.

        Args:
            linked_account_repository: Graph store
            audit_service: Audit trail
        """
        self.linked_account_repository = linked_account_repository
        self.audit_service = audit_service

    async def get_by_id(self, link_id: LinkedAccountId) -> LinkedAccount:
        """Get edge by ID.

        Raises:
            NotFoundError: If the edge does not exist
        """
        link = await self.linked_account_repository.find_by_id(link_id)
        if not link:
            raise NotFoundError("Linked account", str(link_id))
        return link

    async def find_between(self, user_a: UserId, user_b: UserId) -> LinkedAccount | None:
        """Edge between two identities in either direction."""
        return await self.linked_account_repository.find_between(user_a, user_b)

    async def list_for_user(self, user_id: UserId) -> list[LinkedAccount]:
        """All edges touching user_id, verified or pending."""
        return await self.linked_account_repository.find_touching(
            user_id, verified_only=False
        )

    async def propose(
        self,
        primary_user_id: UserId,
        linked_user_id: UserId,
        method: LinkMethod,
        verified: bool,
        primary_trust: ProviderTrust | None = None,
        new_trust: ProviderTrust | None = None,
        performed_by: UserId | None = None,
    ) -> LinkedAccount:
        """Create an edge, reusing one that already joins the pair.

        Args:
            primary_user_id: Anchor identity
            linked_user_id: Identity being linked
            method: How the link was initiated
            verified: Whether the edge is trusted immediately
            primary_trust: Evaluation of the anchor
            new_trust: Evaluation of the linked identity
            performed_by: Identity that triggered the proposal

        Returns:
            The new edge, or the existing one for the pair
        """
        with logfire.span(
            "linked_account_service.propose",
            primary_user_id=str(primary_user_id),
            linked_user_id=str(linked_user_id),
            method=method.value,
        ):
            existing = await self.linked_account_repository.find_between(
                primary_user_id, linked_user_id
            )
            if existing:
                logfire.info("Link already exists", link_id=str(existing.id))
                return existing

            now = utc_now()
            link = await self.linked_account_repository.save(
                LinkedAccount(
                    id=LinkedAccountId(uuid4()),
                    primary_user_id=primary_user_id,
                    linked_user_id=linked_user_id,
                    verified=verified,
                    metadata=LinkMetadata(
                        method=method,
                        primary_trust_score=primary_trust.trust_score
                        if primary_trust
                        else None,
                        new_trust_score=new_trust.trust_score if new_trust else None,
                        requires_verification=not verified,
                        proposed_at=now,
                        verified_at=now if verified else None,
                    ),
                    linked_at=now,
                    updated_at=now,
                )
            )

            await self.audit_service.record(
                AuditAction.LINK_PROPOSED,
                primary_user_id,
                linked_user_id,
                performed_by=performed_by,
                method=method.value,
                link_id=str(link.id),
            )
            if verified:
                await self.audit_service.record(
                    AuditAction.LINK_AUTO_VERIFIED,
                    primary_user_id,
                    linked_user_id,
                    performed_by=performed_by,
                    link_id=str(link.id),
                )
            return link

    async def verify(
        self,
        link: LinkedAccount,
        method: LinkMethod,
        action: AuditAction = AuditAction.LINK_VERIFIED,
        performed_by: UserId | None = None,
    ) -> LinkedAccount:
        """Mark an edge verified. Verified edges are returned unchanged.

        Args:
            link: Edge to verify
            method: What proved the link
            action: Audit action to record
            performed_by: Identity that confirmed the link

        Returns:
            Verified edge
        """
        if link.verified:
            return link

        with logfire.span("linked_account_service.verify", link_id=str(link.id)):
            verified = await self.linked_account_repository.save(
                link.mark_verified(method, by=performed_by)
            )
            await self.audit_service.record(
                action,
                link.primary_user_id,
                link.linked_user_id,
                performed_by=performed_by,
                method=method.value,
                link_id=str(link.id),
            )
            return verified

    async def record_code_recipient(
        self, link: LinkedAccount, email: str
    ) -> LinkedAccount:
        """Remember which address holds the code for a pending edge."""
        if link.metadata.code_sent_to == email:
            return link
        return await self.linked_account_repository.save(
            link.model_copy(
                update={
                    "metadata": link.metadata.model_copy(
                        update={"code_sent_to": email}
                    ),
                    "updated_at": utc_now(),
                }
            )
        )

    async def unlink(self, link: LinkedAccount, performed_by: UserId) -> None:
        """Delete an edge."""
        with logfire.span("linked_account_service.unlink", link_id=str(link.id)):
            await self.linked_account_repository.delete(link.id)
            await self.audit_service.record(
                AuditAction.UNLINKED,
                link.primary_user_id,
                link.linked_user_id,
                performed_by=performed_by,
                link_id=str(link.id),
                was_verified=link.verified,
            )
