"""Unit tests for finishing merges proposed during OAuth login."""

from datetime import timedelta
from uuid import uuid4

import pytest

from saver.adapter.email.sender import MockVerificationEmailSender
from saver.application.usecase.auth import (
    ProviderLoginRequest,
    ProviderLoginUseCase,
    RegisterRequest,
    RegisterUseCase,
)
from saver.application.usecase.linking import (
    CompleteOAuthLinkRequest,
    CompleteOAuthLinkUseCase,
    ResendLinkingCodeRequest,
    ResendLinkingCodeUseCase,
)
from saver.domain.error import (
    ConflictError,
    InvalidVerificationCodeError,
    RateLimitedError,
    ValidationError,
)
from saver.domain.model import User
from saver.domain.model.common import utc_now
from saver.domain.repository import AccountLinkingAuditRepository
from saver.domain.service import UserService
from saver.domain.value import AuditAction, AuthProvider, LoginOutcomeType, UserId
from saver.util.jwt import JWTError
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()

EMAIL = "frank@co.com"


async def pending_google_login(env):
    """Fresh local account, then Google: a merge that needs a code."""
    register = await env.get(RegisterUseCase)
    login = await env.get(ProviderLoginUseCase)
    registered = await register.execute(
        RegisterRequest(email=EMAIL, password="long enough")
    )
    pending = await login.execute(
        ProviderLoginRequest(email=EMAIL, provider=AuthProvider.GOOGLE)
    )
    assert pending.type == LoginOutcomeType.REQUIRES_VERIFICATION
    return registered, pending


class TestCompleteOAuthLink:
    """Tests for CompleteOAuthLinkUseCase."""

    @pytest.mark.asyncio
    async def test_code_required_when_verification_pending(self, unit_env):
        _, pending = await pending_google_login(unit_env)
        use_case = await unit_env.get(CompleteOAuthLinkUseCase)

        with pytest.raises(ValidationError):
            await use_case.execute(
                CompleteOAuthLinkRequest(linking_token=pending.linking.linking_token)
            )

    @pytest.mark.asyncio
    async def test_completion_clears_pending_marker_and_audits(self, unit_env):
        # Arrange
        registered, pending = await pending_google_login(unit_env)
        use_case = await unit_env.get(CompleteOAuthLinkUseCase)
        user_service = await unit_env.get(UserService)
        audit_repo = await unit_env.get(AccountLinkingAuditRepository)
        sender = await unit_env.get(MockVerificationEmailSender)

        # Act
        await use_case.execute(
            CompleteOAuthLinkRequest(
                linking_token=pending.linking.linking_token,
                code=sender.last_code(EMAIL),
            )
        )

        # Assert
        google = await user_service.find_exact(EMAIL, AuthProvider.GOOGLE)
        assert google.metadata.pending_link_with is None
        actions = [entry.action for entry in await audit_repo.find_by_user(google.id)]
        assert AuditAction.LINK_VERIFIED in actions
        assert AuditAction.LINK_COMPLETED in actions

    @pytest.mark.asyncio
    async def test_auto_verified_link_completes_without_code(self, unit_env):
        # Arrange
        user_service = await unit_env.get(UserService)
        login = await unit_env.get(ProviderLoginUseCase)
        use_case = await unit_env.get(CompleteOAuthLinkUseCase)
        created = utc_now() - timedelta(days=30)
        local = await user_service.save(
            User(
                id=UserId(uuid4()),
                email=EMAIL,
                real_email=EMAIL,
                provider=AuthProvider.LOCAL,
                email_verified=True,
                created_at=created,
                updated_at=created,
            )
        )
        pending = await login.execute(
            ProviderLoginRequest(email=EMAIL, provider=AuthProvider.GOOGLE)
        )
        assert pending.type == LoginOutcomeType.REQUIRES_LINKING

        # Act
        response = await use_case.execute(
            CompleteOAuthLinkRequest(linking_token=pending.linking.linking_token)
        )

        # Assert
        assert response.user.user_id == str(local.id)
        assert len(response.linked_user_ids) == 2

    @pytest.mark.asyncio
    async def test_access_token_is_not_a_linking_token(self, unit_env):
        _, pending = await pending_google_login(unit_env)
        use_case = await unit_env.get(CompleteOAuthLinkUseCase)

        with pytest.raises(JWTError):
            await use_case.execute(
                CompleteOAuthLinkRequest(linking_token=pending.token, code="123456")
            )


class TestResendLinkingCode:
    """Tests for ResendLinkingCodeUseCase."""

    @pytest.mark.asyncio
    async def test_resend_issues_fresh_code(self, unit_env):
        # Arrange
        _, pending = await pending_google_login(unit_env)
        use_case = await unit_env.get(ResendLinkingCodeUseCase)
        sender = await unit_env.get(MockVerificationEmailSender)

        # Act
        response = await use_case.execute(
            ResendLinkingCodeRequest(linking_token=pending.linking.linking_token)
        )

        # Assert
        assert response.sent is True
        assert response.expires_at is not None
        assert len(sender.sent) == 2
        assert sender.sent[-1].existing_provider == AuthProvider.LOCAL
        assert sender.sent[-1].new_provider == AuthProvider.GOOGLE

    @pytest.mark.asyncio
    async def test_older_code_stops_working_after_resend(self, unit_env):
        # Arrange
        _, pending = await pending_google_login(unit_env)
        resend = await unit_env.get(ResendLinkingCodeUseCase)
        complete = await unit_env.get(CompleteOAuthLinkUseCase)
        sender = await unit_env.get(MockVerificationEmailSender)
        old_code = sender.last_code(EMAIL)
        await resend.execute(
            ResendLinkingCodeRequest(linking_token=pending.linking.linking_token)
        )
        new_code = sender.last_code(EMAIL)

        # Act / Assert
        if old_code != new_code:
            with pytest.raises(InvalidVerificationCodeError):
                await complete.execute(
                    CompleteOAuthLinkRequest(
                        linking_token=pending.linking.linking_token, code=old_code
                    )
                )
        response = await complete.execute(
            CompleteOAuthLinkRequest(
                linking_token=pending.linking.linking_token, code=new_code
            )
        )
        assert len(response.linked_user_ids) == 2

    @pytest.mark.asyncio
    async def test_resend_rate_limited_after_three_codes(self, unit_env):
        # Arrange
        _, pending = await pending_google_login(unit_env)
        use_case = await unit_env.get(ResendLinkingCodeUseCase)
        request = ResendLinkingCodeRequest(linking_token=pending.linking.linking_token)
        await use_case.execute(request)
        await use_case.execute(request)

        # Act / Assert
        with pytest.raises(RateLimitedError):
            await use_case.execute(request)

    @pytest.mark.asyncio
    async def test_resend_after_completion_conflicts(self, unit_env):
        # Arrange
        _, pending = await pending_google_login(unit_env)
        complete = await unit_env.get(CompleteOAuthLinkUseCase)
        use_case = await unit_env.get(ResendLinkingCodeUseCase)
        sender = await unit_env.get(MockVerificationEmailSender)
        await complete.execute(
            CompleteOAuthLinkRequest(
                linking_token=pending.linking.linking_token,
                code=sender.last_code(EMAIL),
            )
        )

        # Act / Assert
        with pytest.raises(ConflictError):
            await use_case.execute(
                ResendLinkingCodeRequest(linking_token=pending.linking.linking_token)
            )
