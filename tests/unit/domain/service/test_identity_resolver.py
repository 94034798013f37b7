"""Unit tests for IdentityResolver."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from saver.domain.model import LinkedAccount
from saver.domain.service import IdentityResolver
from saver.domain.value import LinkedAccountId, UserId
from saver.persistence.repository.inmemory import InMemoryLinkedAccountRepository

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


async def link(
    repo: InMemoryLinkedAccountRepository,
    a: UserId,
    b: UserId,
    verified: bool = True,
    offset: int = 0,
) -> LinkedAccount:
    return await repo.save(
        LinkedAccount(
            id=LinkedAccountId(uuid4()),
            primary_user_id=a,
            linked_user_id=b,
            verified=verified,
            linked_at=T0 + timedelta(minutes=offset),
            updated_at=T0 + timedelta(minutes=offset),
        )
    )


def ids(n: int) -> list[UserId]:
    return [UserId(uuid4()) for _ in range(n)]


class TestTraverse:
    """Tests for IdentityResolver.traverse()."""

    @pytest.mark.asyncio
    async def test_isolated_identity_resolves_to_itself(self):
        resolver = IdentityResolver(InMemoryLinkedAccountRepository())
        (a,) = ids(1)

        assert await resolver.traverse(a) == [a]

    @pytest.mark.asyncio
    async def test_chain_is_transitive_in_both_directions(self):
        """A-B and B-C make A, B and C one person from any starting point."""
        repo = InMemoryLinkedAccountRepository()
        resolver = IdentityResolver(repo)
        a, b, c = ids(3)
        await link(repo, a, b)
        await link(repo, b, c, offset=1)

        for start in (a, b, c):
            assert set(await resolver.traverse(start)) == {a, b, c}

    @pytest.mark.asyncio
    async def test_unverified_edges_are_ignored(self):
        repo = InMemoryLinkedAccountRepository()
        resolver = IdentityResolver(repo)
        a, b, c = ids(3)
        await link(repo, a, b)
        await link(repo, b, c, verified=False)

        assert set(await resolver.traverse(a)) == {a, b}
        assert await resolver.traverse(c) == [c]

    @pytest.mark.asyncio
    async def test_duplicate_edges_and_cycles(self):
        repo = InMemoryLinkedAccountRepository()
        resolver = IdentityResolver(repo)
        a, b, c = ids(3)
        await link(repo, a, b)
        await link(repo, b, a, offset=1)
        await link(repo, b, c, offset=2)
        await link(repo, c, a, offset=3)

        result = await resolver.traverse(a)

        assert len(result) == 3
        assert set(result) == {a, b, c}
        assert result[0] == a

    @pytest.mark.asyncio
    async def test_resolution_is_stable_across_calls_and_insertion_order(self):
        a, b, c, d = ids(4)
        edges = [(a, b), (c, b), (c, d)]
        forward = InMemoryLinkedAccountRepository()
        backward = InMemoryLinkedAccountRepository()
        for offset, (x, y) in enumerate(edges):
            await link(forward, x, y, offset=offset)
        for offset, (x, y) in enumerate(reversed(edges)):
            await link(backward, y, x, offset=offset)

        for repo in (forward, backward):
            resolver = IdentityResolver(repo, trust_cached_ids=False)
            first = await resolver.traverse(a)
            second = await resolver.traverse(a)
            resolved = await resolver.resolve(a, [a, b])

            assert set(first) == set(second) == set(resolved) == {a, b, c, d}
            assert len(first) == 4


class TestResolve:
    """Tests for IdentityResolver.resolve()."""

    @pytest.mark.asyncio
    async def test_trusts_cached_snapshot_with_several_ids(self):
        """A stale snapshot is returned as-is on the fast path."""
        repo = InMemoryLinkedAccountRepository()
        resolver = IdentityResolver(repo, trust_cached_ids=True)
        a, b, c = ids(3)
        await link(repo, a, c)

        result = await resolver.resolve(a, [a, b])

        assert result == [a, b]

    @pytest.mark.asyncio
    async def test_single_id_snapshot_falls_back_to_traversal(self):
        repo = InMemoryLinkedAccountRepository()
        resolver = IdentityResolver(repo, trust_cached_ids=True)
        a, b = ids(2)
        await link(repo, a, b)

        assert set(await resolver.resolve(a, [a])) == {a, b}

    @pytest.mark.asyncio
    async def test_snapshot_without_start_is_ignored(self):
        repo = InMemoryLinkedAccountRepository()
        resolver = IdentityResolver(repo, trust_cached_ids=True)
        a, b, c = ids(3)

        assert await resolver.resolve(a, [b, c]) == [a]

    @pytest.mark.asyncio
    async def test_fast_path_can_be_disabled(self):
        repo = InMemoryLinkedAccountRepository()
        resolver = IdentityResolver(repo, trust_cached_ids=False)
        a, b = ids(2)

        assert await resolver.resolve(a, [a, b]) == [a]
