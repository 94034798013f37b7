"""Application layer DI providers."""

from dishka import Scope, provide

from saver.application.usecase.auth import (
    AuthenticateRequestUseCase,
    OAuthLoginUseCase,
    PasswordLoginUseCase,
    ProviderLoginUseCase,
    RegisterUseCase,
)
from saver.application.usecase.linking import (
    CompleteOAuthLinkUseCase,
    InitiateLinkUseCase,
    ListLinkedAccountsUseCase,
    ResendLinkingCodeUseCase,
    SetPrimaryAccountUseCase,
    UnlinkAccountUseCase,
    VerifyLinkUseCase,
)
from saver.config import Settings
from saver.domain.service import (
    AuditService,
    AuthService,
    IdentityResolver,
    JWTService,
    LinkedAccountService,
    LinkingCodeService,
    PasswordHasher,
    TokenIssuer,
    UserService,
)
from saver.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    # Auth use cases
    @provide(scope=Scope.REQUEST)
    def get_provider_login_use_case(
        self,
        user_service: UserService,
        linked_account_service: LinkedAccountService,
        identity_resolver: IdentityResolver,
        linking_code_service: LinkingCodeService,
        audit_service: AuditService,
        token_issuer: TokenIssuer,
        jwt_service: JWTService,
        settings: Settings,
    ) -> ProviderLoginUseCase:
        """Provide provider login use case."""
        return ProviderLoginUseCase(
            user_service=user_service,
            linked_account_service=linked_account_service,
            identity_resolver=identity_resolver,
            linking_code_service=linking_code_service,
            audit_service=audit_service,
            token_issuer=token_issuer,
            jwt_service=jwt_service,
            settings=settings,
        )

    @provide(scope=Scope.REQUEST)
    def get_oauth_login_use_case(
        self, auth_service: AuthService, provider_login: ProviderLoginUseCase
    ) -> OAuthLoginUseCase:
        """Provide OAuth login use case."""
        return OAuthLoginUseCase(auth_service=auth_service, provider_login=provider_login)

    @provide(scope=Scope.REQUEST)
    def get_password_login_use_case(
        self,
        user_service: UserService,
        password_hasher: PasswordHasher,
        token_issuer: TokenIssuer,
    ) -> PasswordLoginUseCase:
        """Provide password login use case."""
        return PasswordLoginUseCase(
            user_service=user_service,
            password_hasher=password_hasher,
            token_issuer=token_issuer,
        )

    @provide(scope=Scope.REQUEST)
    def get_register_use_case(
        self,
        user_service: UserService,
        password_hasher: PasswordHasher,
        audit_service: AuditService,
        token_issuer: TokenIssuer,
    ) -> RegisterUseCase:
        """Provide register use case."""
        return RegisterUseCase(
            user_service=user_service,
            password_hasher=password_hasher,
            audit_service=audit_service,
            token_issuer=token_issuer,
        )

    @provide(scope=Scope.REQUEST)
    def get_authenticate_use_case(
        self,
        jwt_service: JWTService,
        user_service: UserService,
        identity_resolver: IdentityResolver,
    ) -> AuthenticateRequestUseCase:
        """Provide per-request authentication use case."""
        return AuthenticateRequestUseCase(
            jwt_service=jwt_service,
            user_service=user_service,
            identity_resolver=identity_resolver,
        )

    # Account linking use cases
    @provide(scope=Scope.REQUEST)
    def get_list_linked_accounts_use_case(
        self, user_service: UserService, linked_account_service: LinkedAccountService
    ) -> ListLinkedAccountsUseCase:
        """Provide list linked accounts use case."""
        return ListLinkedAccountsUseCase(
            user_service=user_service, linked_account_service=linked_account_service
        )

    @provide(scope=Scope.REQUEST)
    def get_initiate_link_use_case(
        self,
        user_service: UserService,
        linked_account_service: LinkedAccountService,
        linking_code_service: LinkingCodeService,
    ) -> InitiateLinkUseCase:
        """Provide initiate link use case."""
        return InitiateLinkUseCase(
            user_service=user_service,
            linked_account_service=linked_account_service,
            linking_code_service=linking_code_service,
        )

    @provide(scope=Scope.REQUEST)
    def get_verify_link_use_case(
        self,
        user_service: UserService,
        linked_account_service: LinkedAccountService,
        linking_code_service: LinkingCodeService,
        token_issuer: TokenIssuer,
    ) -> VerifyLinkUseCase:
        """Provide verify link use case."""
        return VerifyLinkUseCase(
            user_service=user_service,
            linked_account_service=linked_account_service,
            linking_code_service=linking_code_service,
            token_issuer=token_issuer,
        )

    @provide(scope=Scope.REQUEST)
    def get_unlink_account_use_case(
        self,
        user_service: UserService,
        linked_account_service: LinkedAccountService,
        identity_resolver: IdentityResolver,
        token_issuer: TokenIssuer,
    ) -> UnlinkAccountUseCase:
        """Provide unlink use case."""
        return UnlinkAccountUseCase(
            user_service=user_service,
            linked_account_service=linked_account_service,
            identity_resolver=identity_resolver,
            token_issuer=token_issuer,
        )

    @provide(scope=Scope.REQUEST)
    def get_complete_oauth_link_use_case(
        self,
        jwt_service: JWTService,
        user_service: UserService,
        linked_account_service: LinkedAccountService,
        linking_code_service: LinkingCodeService,
        audit_service: AuditService,
        token_issuer: TokenIssuer,
    ) -> CompleteOAuthLinkUseCase:
        """Provide complete OAuth link use case."""
        return CompleteOAuthLinkUseCase(
            jwt_service=jwt_service,
            user_service=user_service,
            linked_account_service=linked_account_service,
            linking_code_service=linking_code_service,
            audit_service=audit_service,
            token_issuer=token_issuer,
        )

    @provide(scope=Scope.REQUEST)
    def get_resend_linking_code_use_case(
        self,
        jwt_service: JWTService,
        linked_account_service: LinkedAccountService,
        linking_code_service: LinkingCodeService,
    ) -> ResendLinkingCodeUseCase:
        """Provide resend linking code use case."""
        return ResendLinkingCodeUseCase(
            jwt_service=jwt_service,
            linked_account_service=linked_account_service,
            linking_code_service=linking_code_service,
        )

    @provide(scope=Scope.REQUEST)
    def get_set_primary_account_use_case(
        self,
        user_service: UserService,
        audit_service: AuditService,
        token_issuer: TokenIssuer,
    ) -> SetPrimaryAccountUseCase:
        """Provide set primary account use case."""
        return SetPrimaryAccountUseCase(
            user_service=user_service,
            audit_service=audit_service,
            token_issuer=token_issuer,
        )
