"""Linked account edge.

An undirected link between two identities stored as a directed pair.
Transitivity is never materialized; it is computed at read time.
"""

from datetime import datetime

from pydantic import Field

from saver.domain.model.common import DomainModel, utc_now
from saver.domain.value import LinkedAccountId, LinkMethod, UserId


class LinkMetadata(DomainModel):
    """How and why an edge was created or verified."""

    method: LinkMethod = LinkMethod.OAUTH
    primary_trust_score: int | None = None
    new_trust_score: int | None = None
    requires_verification: bool = False
    proposed_at: datetime | None = None
    verified_at: datetime | None = None
    verified_by: UserId | None = None
    code_sent_to: str | None = None  # Recipient of the manual linking code


class LinkedAccount(DomainModel):
    """Edge between two identities believed to belong to one person."""

    id: LinkedAccountId
    primary_user_id: UserId
    linked_user_id: UserId
    verified: bool = False
    verification_code: str | None = None  # Hashed, manual flows only
    metadata: LinkMetadata = Field(default_factory=LinkMetadata)
    linked_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def involves(self, user_id: UserId) -> bool:
        """Whether user_id is either endpoint."""
        return user_id in (self.primary_user_id, self.linked_user_id)

    def other_party(self, user_id: UserId) -> UserId:
        """Endpoint opposite user_id.

        Raises:
            ValueError: If user_id is not an endpoint
        """
        if user_id == self.primary_user_id:
            return self.linked_user_id
        if user_id == self.linked_user_id:
            return self.primary_user_id
        raise ValueError(f"User {user_id} is not part of link {self.id}")

    def mark_verified(
        self, method: LinkMethod, by: UserId | None = None, at: datetime | None = None
    ) -> "LinkedAccount":
        """Copy with the edge verified."""
        at = at or utc_now()
        metadata = self.metadata.model_copy(
            update={"method": method, "verified_at": at, "verified_by": by}
        )
        return self.model_copy(
            update={
                "verified": True,
                "verification_code": None,
                "metadata": metadata,
                "updated_at": at,
            }
        )
