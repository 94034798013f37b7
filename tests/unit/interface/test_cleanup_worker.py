"""Unit tests for the verification code sweeper."""

import asyncio
from uuid import uuid4

import pytest

from saver.domain.service import VerificationCodeService
from saver.domain.value import UserId, VerificationPurpose
from saver.interface.worker.cleanup import VerificationCodeSweeper
from tests.harness import create_container_fixture

# Root container fixture; each sweep opens its own scope
unit_container = create_container_fixture()


async def store(container, expires_in_minutes: int) -> None:
    async with container() as scope:
        service = await scope.get(VerificationCodeService)
        await service.store_code(
            UserId(uuid4()),
            "gina@example.com",
            VerificationPurpose.ACCOUNT_LINKING,
            expires_in_minutes=expires_in_minutes,
        )


class TestVerificationCodeSweeper:
    """Tests for VerificationCodeSweeper."""

    @pytest.mark.asyncio
    async def test_sweep_deletes_expired_codes_only(self, unit_container):
        # Arrange
        await store(unit_container, expires_in_minutes=-1)
        await store(unit_container, expires_in_minutes=15)
        sweeper = VerificationCodeSweeper(unit_container, interval_seconds=60)

        # Act
        deleted = await sweeper.sweep_once()

        # Assert
        assert deleted == 1
        assert await sweeper.sweep_once() == 0

    @pytest.mark.asyncio
    async def test_start_sweeps_immediately_and_stop_cancels(self, unit_container):
        # Arrange
        await store(unit_container, expires_in_minutes=-1)
        sweeper = VerificationCodeSweeper(unit_container, interval_seconds=3600)

        # Act
        sweeper.start()
        await asyncio.sleep(0.05)

        # Assert
        assert sweeper.running
        assert await sweeper.sweep_once() == 0

        await sweeper.stop()
        assert not sweeper.running

    @pytest.mark.asyncio
    async def test_double_start_rejected(self, unit_container):
        sweeper = VerificationCodeSweeper(unit_container, interval_seconds=3600)
        sweeper.start()
        try:
            with pytest.raises(RuntimeError):
                sweeper.start()
        finally:
            await sweeper.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start_is_noop(self, unit_container):
        sweeper = VerificationCodeSweeper(unit_container, interval_seconds=3600)

        await sweeper.stop()

        assert not sweeper.running
