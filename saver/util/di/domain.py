"""Domain layer DI providers."""

from dishka import Scope, provide

from saver.config import AuthSettings, Settings
from saver.domain.repository import (
    AccountLinkingAuditRepository,
    LinkedAccountRepository,
    UserRepository,
    VerificationCodeRepository,
)
from saver.domain.service import (
    AuditService,
    AuthService,
    IdentityResolver,
    JWTService,
    LinkedAccountService,
    LinkingCodeService,
    OAuthClient,
    TokenIssuer,
    UserService,
    VerificationCodeService,
    VerificationEmailSender,
)
from saver.domain.value import AuthProvider
from saver.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    Each HTTP request gets fresh service instances with their own transaction.
    """

    scope = Scope.REQUEST

    @provide
    def get_auth_service(
        self, oauth_clients: dict[AuthProvider, OAuthClient]
    ) -> AuthService:
        """Provide multi-provider authentication domain service."""
        return AuthService(oauth_clients=oauth_clients)

    @provide
    def get_jwt_service(self, auth_settings: AuthSettings) -> JWTService:
        """Provide JWT token domain service."""
        return JWTService(auth_settings=auth_settings)

    @provide
    def get_audit_service(
        self, audit_repository: AccountLinkingAuditRepository
    ) -> AuditService:
        """Provide audit trail service."""
        return AuditService(audit_repository=audit_repository)

    @provide
    def get_user_service(self, user_repository: UserRepository) -> UserService:
        """Provide user domain service."""
        return UserService(user_repository=user_repository)

    @provide
    def get_linked_account_service(
        self,
        linked_account_repository: LinkedAccountRepository,
        audit_service: AuditService,
    ) -> LinkedAccountService:
        """Provide linked account domain service."""
        return LinkedAccountService(
            linked_account_repository=linked_account_repository,
            audit_service=audit_service,
        )

    @provide
    def get_identity_resolver(
        self,
        linked_account_repository: LinkedAccountRepository,
        auth_settings: AuthSettings,
    ) -> IdentityResolver:
        """Provide identity resolver."""
        return IdentityResolver(
            linked_account_repository=linked_account_repository,
            trust_cached_ids=auth_settings.trust_token_linked_ids,
        )

    @provide
    def get_verification_code_service(
        self,
        verification_code_repository: VerificationCodeRepository,
        settings: Settings,
    ) -> VerificationCodeService:
        """Provide verification code service."""
        return VerificationCodeService(
            verification_code_repository=verification_code_repository,
            settings=settings.verification,
            hash_secret=settings.code_hash_secret,
        )

    @provide
    def get_linking_code_service(
        self,
        verification_code_service: VerificationCodeService,
        email_sender: VerificationEmailSender,
        audit_service: AuditService,
    ) -> LinkingCodeService:
        """Provide linking code service."""
        return LinkingCodeService(
            verification_code_service=verification_code_service,
            email_sender=email_sender,
            audit_service=audit_service,
        )

    @provide
    def get_token_issuer(
        self,
        user_service: UserService,
        identity_resolver: IdentityResolver,
        jwt_service: JWTService,
    ) -> TokenIssuer:
        """Provide bearer token issuer."""
        return TokenIssuer(
            user_service=user_service,
            identity_resolver=identity_resolver,
            jwt_service=jwt_service,
        )
