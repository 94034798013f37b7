"""Identity resolution over the linked-account graph."""

from collections import deque

import logfire

from saver.domain.repository.linked_account import LinkedAccountRepository
from saver.domain.value import UserId

from .base import Service


class IdentityResolver(Service):
    """Computes the set of identities reachable through verified links.

    Edges are treated as a set, so duplicate edges between the same pair
    never change the result.
    """

    def __init__(
        self,
        linked_account_repository: LinkedAccountRepository,
        trust_cached_ids: bool = True,
    ) -> None:
        """Initialize identity resolver.

        Args:
            linked_account_repository: Graph store
            trust_cached_ids: Accept caller-supplied snapshots (token
                linkedUserIds) instead of traversing
        """
        self.linked_account_repository = linked_account_repository
        self.trust_cached_ids = trust_cached_ids

    async def resolve(
        self, start_id: UserId, cached_ids: list[UserId] | None = None
    ) -> list[UserId]:
        """Return every identity linked to start_id, start_id included.

        A cached snapshot is returned as-is when snapshots are trusted, it
        lists more than one id and it contains start_id. It may omit links
        created after it was taken.

        Args:
            start_id: Identity to resolve from
            cached_ids: Snapshot from a previously issued token

        Returns:
            Unique identity IDs (order irrelevant)
        """
        if (
            self.trust_cached_ids
            and cached_ids
            and len(cached_ids) > 1
            and start_id in cached_ids
        ):
            return list(dict.fromkeys(cached_ids))

        return await self.traverse(start_id)

    async def traverse(self, start_id: UserId) -> list[UserId]:
        """Breadth-first closure over verified edges, ignoring any cache."""
        with logfire.span("identity_resolver.traverse", start_id=str(start_id)):
            visited: set[UserId] = {start_id}
            order: list[UserId] = [start_id]
            queue: deque[UserId] = deque([start_id])

            while queue:
                current = queue.popleft()
                edges = await self.linked_account_repository.find_touching(
                    current, verified_only=True
                )
                for edge in edges:
                    for endpoint in (edge.primary_user_id, edge.linked_user_id):
                        if endpoint not in visited:
                            visited.add(endpoint)
                            order.append(endpoint)
                            queue.append(endpoint)

            logfire.info(
                "Linked identities resolved",
                start_id=str(start_id),
                count=len(order),
            )
            return order
