"""Unit tests for ProviderLoginUseCase."""

from datetime import timedelta
from uuid import UUID, uuid4

from dishka import AsyncContainer
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
)
from saver.domain.model import User
from saver.domain.model.common import utc_now
from saver.domain.repository import AccountLinkingAuditRepository
from saver.domain.service import (
    JWTService,
    LinkedAccountService,
    PasswordHasher,
    UserService,
)
from saver.domain.service.trust import evaluate_provider_trust
from saver.domain.value import (
    AuditAction,
    AuthProvider,
    LinkMethod,
    LoginOutcomeType,
    TrustLevel,
    UserId,
)
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()

ALICE = "alice@co.com"


def as_user_id(value: str) -> UserId:
    return UserId(UUID(value))


def google_login(email: str = ALICE, **kwargs) -> ProviderLoginRequest:
    return ProviderLoginRequest(
        email=email,
        provider=AuthProvider.GOOGLE,
        provider_user_id=f"google-{email}",
        email_verified=True,
        **kwargs,
    )


async def save_old_local_account(env: AsyncContainer, email: str = ALICE) -> User:
    """A local account registered a month ago."""
    user_service = await env.get(UserService)
    hasher = await env.get(PasswordHasher)
    created = utc_now() - timedelta(days=30)
    return await user_service.save(
        User(
            id=UserId(uuid4()),
            email=email,
            real_email=email,
            provider=AuthProvider.LOCAL,
            password_hash=hasher.hash("correct horse battery"),
            email_verified=True,
            created_at=created,
            updated_at=created,
        )
    )


class TestProviderLoginNewIdentity:
    """Logins with no other identity for the email."""

    @pytest.mark.asyncio
    async def test_first_login_creates_identity(self, unit_env: AsyncContainer):
        """First Google login creates the identity and succeeds."""
        # Arrange
        use_case = await unit_env.get(ProviderLoginUseCase)
        user_service = await unit_env.get(UserService)
        audit_repo = await unit_env.get(AccountLinkingAuditRepository)

        # Act
        response = await use_case.execute(google_login("bob@gmail.com"))

        # Assert
        assert response.type == LoginOutcomeType.SUCCESS
        assert response.linking is None
        user = await user_service.find_by_real_email("bob@gmail.com", AuthProvider.GOOGLE)
        assert user is not None
        assert response.user.user_id == str(user.id)
        assert response.linked_user_ids == [str(user.id)]
        assert user.metadata.trust_score == 80
        entries = await audit_repo.find_by_user(user.id)
        assert [e.action for e in entries] == [AuditAction.ACCOUNT_CREATED]

    @pytest.mark.asyncio
    async def test_repeat_login_reuses_identity(self, unit_env):
        # Arrange
        use_case = await unit_env.get(ProviderLoginUseCase)
        user_service = await unit_env.get(UserService)
        first = await use_case.execute(google_login("bob@gmail.com"))

        # Act
        second = await use_case.execute(google_login("Bob@Gmail.com "))

        # Assert
        assert second.type == LoginOutcomeType.SUCCESS
        assert second.user.user_id == first.user.user_id
        assert len(await user_service.find_all_by_real_email("bob@gmail.com")) == 1

    @pytest.mark.asyncio
    async def test_redirect_targets_client_port(self, unit_env):
        use_case = await unit_env.get(ProviderLoginUseCase)

        response = await use_case.execute(google_login("bob@gmail.com", client_port=3456))

        assert response.redirect_url.startswith(
            "http://localhost:3456/auth/callback/google?token="
        )
        assert "type=success" in response.redirect_url

    @pytest.mark.asyncio
    async def test_redirect_without_port_uses_desktop_url(self, unit_env):
        use_case = await unit_env.get(ProviderLoginUseCase)

        response = await use_case.execute(google_login("bob@gmail.com"))

        assert response.redirect_url.startswith("http://localhost:19858?token=")


class TestProviderLoginLinking:
    """Logins whose email already belongs to another provider's identity."""

    @pytest.mark.asyncio
    async def test_young_local_account_requires_verification(self, unit_env):
        """Local account (trust 70, <24h old) plus enterprise Google needs a code."""
        # Arrange
        register = await unit_env.get(RegisterUseCase)
        use_case = await unit_env.get(ProviderLoginUseCase)
        linked_account_service = await unit_env.get(LinkedAccountService)
        sender = await unit_env.get(MockVerificationEmailSender)
        registered = await register.execute(
            RegisterRequest(email=ALICE, password="correct horse battery")
        )

        # Act
        response = await use_case.execute(google_login())

        # Assert
        assert response.type == LoginOutcomeType.REQUIRES_VERIFICATION
        linking = response.linking
        assert linking is not None
        assert linking.primary_user_id == registered.user.user_id
        assert linking.primary_provider == AuthProvider.LOCAL
        assert linking.new_provider == AuthProvider.GOOGLE
        assert linking.requires_verification is True
        assert linking.trust_level == TrustLevel.MEDIUM
        assert linking.verification_code_sent is True
        assert sender.last_code(ALICE) is not None

        # Token is scoped to the Google identity alone
        assert response.linked_user_ids == [linking.new_user_id]
        assert response.user.provider == AuthProvider.GOOGLE
        assert "linking_token=" in response.redirect_url

        link = await linked_account_service.find_between(
            as_user_id(registered.user.user_id),
            as_user_id(response.linking.new_user_id),
        )
        assert link is not None
        assert link.verified is False

    @pytest.mark.asyncio
    async def test_verified_code_merges_identities(self, unit_env):
        """Submitting the emailed code links both identities into one token."""
        # Arrange
        register = await unit_env.get(RegisterUseCase)
        use_case = await unit_env.get(ProviderLoginUseCase)
        complete = await unit_env.get(CompleteOAuthLinkUseCase)
        jwt_service = await unit_env.get(JWTService)
        sender = await unit_env.get(MockVerificationEmailSender)
        registered = await register.execute(
            RegisterRequest(email=ALICE, password="correct horse battery")
        )
        pending = await use_case.execute(google_login())

        # Act
        merged = await complete.execute(
            CompleteOAuthLinkRequest(
                linking_token=pending.linking.linking_token,
                code=sender.last_code(ALICE),
            )
        )

        # Assert
        expected = {registered.user.user_id, pending.linking.new_user_id}
        assert merged.user.user_id == registered.user.user_id
        assert set(merged.linked_user_ids) == expected
        payload = jwt_service.verify_token(merged.token)
        assert set(payload.linked_user_ids) == expected

        # Next Google login goes straight through, as the local primary
        again = await use_case.execute(google_login())
        assert again.type == LoginOutcomeType.SUCCESS
        assert again.user.user_id == registered.user.user_id
        assert again.user.provider == AuthProvider.LOCAL
        assert set(again.linked_user_ids) == expected

    @pytest.mark.asyncio
    async def test_repeat_login_while_pending_reuses_edge(self, unit_env):
        # Arrange
        register = await unit_env.get(RegisterUseCase)
        use_case = await unit_env.get(ProviderLoginUseCase)
        linked_account_service = await unit_env.get(LinkedAccountService)
        sender = await unit_env.get(MockVerificationEmailSender)
        await register.execute(RegisterRequest(email=ALICE, password="correct horse battery"))
        first = await use_case.execute(google_login())

        # Act
        second = await use_case.execute(google_login())

        # Assert
        assert second.type == LoginOutcomeType.REQUIRES_VERIFICATION
        assert second.linking.new_user_id == first.linking.new_user_id
        links = await linked_account_service.list_for_user(
            as_user_id(first.linking.new_user_id)
        )
        assert len(links) == 1
        assert len(sender.sent) == 2

    @pytest.mark.asyncio
    async def test_established_local_account_links_without_code(self, unit_env):
        """A month-old local account and enterprise Google are linked immediately."""
        # Arrange
        local = await save_old_local_account(unit_env)
        use_case = await unit_env.get(ProviderLoginUseCase)
        sender = await unit_env.get(MockVerificationEmailSender)

        # Act
        response = await use_case.execute(google_login())

        # Assert
        assert response.type == LoginOutcomeType.REQUIRES_LINKING
        assert response.linking.requires_verification is False
        assert response.linking.verification_code_sent is False
        assert sender.sent == []

        again = await use_case.execute(google_login())
        assert again.type == LoginOutcomeType.SUCCESS
        assert again.user.user_id == str(local.id)
        assert set(again.linked_user_ids) == {str(local.id), response.linking.new_user_id}

    @pytest.mark.asyncio
    async def test_unverified_github_email_requires_code(self, unit_env):
        # Arrange
        await save_old_local_account(unit_env)
        use_case = await unit_env.get(ProviderLoginUseCase)

        # Act
        response = await use_case.execute(
            ProviderLoginRequest(
                email=ALICE,
                provider=AuthProvider.GITHUB,
                email_verified=False,
            )
        )

        # Assert
        assert response.type == LoginOutcomeType.REQUIRES_VERIFICATION
        assert response.linking.trust_level == TrustLevel.LOW

    @pytest.mark.asyncio
    async def test_local_identity_preferred_as_primary(self, unit_env):
        """With Google and local both present, GitHub is proposed against local."""
        # Arrange
        local = await save_old_local_account(unit_env)
        use_case = await unit_env.get(ProviderLoginUseCase)
        await use_case.execute(google_login())

        # Act
        response = await use_case.execute(
            ProviderLoginRequest(
                email=ALICE, provider=AuthProvider.GITHUB, email_verified=True
            )
        )

        # Assert
        assert response.linking.primary_user_id == str(local.id)
        assert response.linking.primary_provider == AuthProvider.LOCAL


    @pytest.mark.asyncio
    async def test_identity_linked_through_another_provider_logs_in(self, unit_env):
        """Google reaches local through GitHub despite an unlinked Microsoft row."""
        # Arrange
        local = await save_old_local_account(unit_env)
        user_service = await unit_env.get(UserService)
        linked_account_service = await unit_env.get(LinkedAccountService)
        github, google, _ = [
            await user_service.create_identity(
                real_email=ALICE,
                provider=provider,
                trust=evaluate_provider_trust(provider, ALICE, True),
            )
            for provider in (
                AuthProvider.GITHUB,
                AuthProvider.GOOGLE,
                AuthProvider.MICROSOFT,
            )
        ]
        for a, b in ((local, github), (github, google)):
            await linked_account_service.propose(
                primary_user_id=a.id,
                linked_user_id=b.id,
                method=LinkMethod.OAUTH,
                verified=True,
            )
        use_case = await unit_env.get(ProviderLoginUseCase)

        # Act
        response = await use_case.execute(google_login())

        # Assert
        assert response.type == LoginOutcomeType.SUCCESS
        assert response.user.user_id == str(local.id)
        assert set(response.linked_user_ids) == {
            str(local.id),
            str(github.id),
            str(google.id),
        }
        assert await linked_account_service.find_between(local.id, google.id) is None
