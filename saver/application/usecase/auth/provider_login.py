"""Provider login use case.

Decides, for one authentication event, which identity the login belongs to:

1. Exact (email, provider) identity with no unlinked same-email identities
   on other providers: success.
2. Identity found through its real email (legacy rows store a synthesized
   login email) that is part of a verified link: success.
3. Otherwise, when other providers hold the same real email, the anchor is
   the local identity if there is one, else the oldest.
4. An identity the resolver already joins to the anchor logs in as it.
   Otherwise an edge between anchor and this provider's identity decides:
   verified logs in as the anchor; unverified is auto-verified when trust
   allows, else needs a code; none creates the identity and proposes a link.
5. Nobody has this email: create the identity and log in.
"""

import logfire
from pydantic import BaseModel

from saver.application.usecase.common import (
    IdentitySummary,
    build_redirect_url,
    normalize_email,
)
from saver.config import Settings
from saver.domain.model.linked_account import LinkedAccount
from saver.domain.model.user import User
from saver.domain.service import (
    AuditService,
    IdentityResolver,
    JWTService,
    LinkedAccountService,
    LinkingCodeService,
    TokenIssuer,
    UserService,
)
from saver.domain.service.trust import (
    combined_trust_level,
    evaluate_provider_trust,
    evaluate_user_trust,
    requires_verification,
)
from saver.domain.value import (
    AuditAction,
    AuthProvider,
    LinkMethod,
    LoginOutcomeType,
    ProviderTrust,
    TrustLevel,
)


class ProviderLoginRequest(BaseModel):
    """Verified identity reported by a provider."""

    email: str
    provider: AuthProvider
    provider_user_id: str | None = None
    email_verified: bool | None = None  # Provider-reported flag
    display_name: str | None = None
    avatar_url: str | None = None
    client_port: int | None = None  # Desktop redirect hint


class LinkingData(BaseModel):
    """Pending merge handed to the client."""

    primary_user_id: str
    new_user_id: str
    email: str
    primary_provider: AuthProvider
    new_provider: AuthProvider
    requires_verification: bool
    trust_level: TrustLevel
    linking_token: str
    verification_code_sent: bool = False
    wait_minutes: int | None = None


class ProviderLoginResponse(BaseModel):
    """Login outcome.

    For success, token and user describe the primary identity and its
    linked set. For the pending outcomes they describe the new provider
    identity alone, and ``linking`` carries the merge proposal.
    """

    type: LoginOutcomeType
    token: str
    user: IdentitySummary
    linked_user_ids: list[str]
    linking: LinkingData | None = None
    redirect_url: str


class _LoginContext(BaseModel):
    request: ProviderLoginRequest
    email: str
    new_trust: ProviderTrust


class ProviderLoginUseCase:
    """Use case resolving an OAuth or passkey login to an identity."""

    def __init__(
        self,
        user_service: UserService,
        linked_account_service: LinkedAccountService,
        identity_resolver: IdentityResolver,
        linking_code_service: LinkingCodeService,
        audit_service: AuditService,
        token_issuer: TokenIssuer,
        jwt_service: JWTService,
        settings: Settings,
    ) -> None:
        """Initialize provider login use case.

        Args:
            user_service: User domain service
            linked_account_service: Linked account domain service
            identity_resolver: Linked set resolution
            linking_code_service: Linking code issuance and delivery
            audit_service: Audit trail
            token_issuer: Bearer token issuance
            jwt_service: Linking token signing
            settings: Application settings
        """
        self.user_service = user_service
        self.linked_account_service = linked_account_service
        self.identity_resolver = identity_resolver
        self.linking_code_service = linking_code_service
        self.audit_service = audit_service
        self.token_issuer = token_issuer
        self.jwt_service = jwt_service
        self.settings = settings

    async def execute(self, request: ProviderLoginRequest) -> ProviderLoginResponse:
        """Resolve the login and issue tokens.

        Args:
            request: Provider-verified identity

        Returns:
            success, requires_linking or requires_verification outcome

        Raises:
            ValidationError: If the email is malformed
        """
        email = normalize_email(request.email)
        ctx = _LoginContext(
            request=request,
            email=email,
            new_trust=evaluate_provider_trust(
                request.provider, email, request.email_verified
            ),
        )

        with logfire.span(
            "provider_login", provider=request.provider.value, email=email
        ):
            exact = await self.user_service.find_exact(email, request.provider)
            candidate = exact or await self.user_service.find_by_real_email(
                email, request.provider
            )
            same_email = await self.user_service.find_all_by_real_email(email)
            others = [u for u in same_email if u.provider != request.provider]

            if candidate is not None:
                linked = set(await self.identity_resolver.traverse(candidate.id))
                if exact is not None and all(o.id in linked for o in others):
                    return await self._success(ctx, candidate)
                if exact is None and (len(linked) > 1 or not others):
                    # Legacy identity stored under a synthesized login email
                    return await self._success(ctx, candidate)

            if not others:
                user = await self._create_identity(ctx)
                return await self._success(ctx, user, touch=False)

            primary = next(
                (u for u in others if u.provider == AuthProvider.LOCAL), others[0]
            )
            return await self._resolve_against_primary(ctx, primary, candidate)

    async def _resolve_against_primary(
        self, ctx: _LoginContext, primary: User, candidate: User | None
    ) -> ProviderLoginResponse:
        primary_trust = evaluate_user_trust(primary)
        needs_verification = requires_verification(
            primary_trust, ctx.new_trust, primary
        )
        logfire.info(
            "Same-email identity on another provider",
            primary_user_id=str(primary.id),
            primary_provider=primary.provider.value,
            primary_trust=primary_trust.trust_score,
            new_trust=ctx.new_trust.trust_score,
            requires_verification=needs_verification,
        )

        if candidate is not None:
            if primary.id in await self.identity_resolver.traverse(candidate.id):
                # Already joined through another identity
                await self.user_service.record_login(candidate, ctx.new_trust)
                return await self._success(ctx, primary, touch=False)

            edge = await self.linked_account_service.find_between(
                primary.id, candidate.id
            )
            if edge is not None:
                return await self._resolve_existing_edge(
                    ctx, primary, candidate, edge, primary_trust, needs_verification
                )
            candidate = await self.user_service.record_login(candidate, ctx.new_trust)
        else:
            candidate = await self._create_identity(ctx)
            # A concurrent login may have linked the pair meanwhile
            edge = await self.linked_account_service.find_between(
                primary.id, candidate.id
            )
            if edge is not None:
                return await self._resolve_existing_edge(
                    ctx, primary, candidate, edge, primary_trust, needs_verification
                )

        await self.linked_account_service.propose(
            primary_user_id=primary.id,
            linked_user_id=candidate.id,
            method=LinkMethod.OAUTH,
            verified=not needs_verification,
            primary_trust=primary_trust,
            new_trust=ctx.new_trust,
            performed_by=candidate.id,
        )
        outcome = (
            LoginOutcomeType.REQUIRES_VERIFICATION
            if needs_verification
            else LoginOutcomeType.REQUIRES_LINKING
        )
        return await self._pending(
            ctx, outcome, primary, candidate, primary_trust, needs_verification
        )

    async def _resolve_existing_edge(
        self,
        ctx: _LoginContext,
        primary: User,
        candidate: User,
        edge: LinkedAccount,
        primary_trust: ProviderTrust,
        needs_verification: bool,
    ) -> ProviderLoginResponse:
        if edge.verified:
            await self.user_service.record_login(candidate, ctx.new_trust)
            return await self._success(ctx, primary, touch=False)

        if not needs_verification:
            await self.linked_account_service.verify(
                edge,
                LinkMethod.AUTO_TRUST,
                action=AuditAction.LINK_AUTO_VERIFIED,
                performed_by=candidate.id,
            )
            candidate = candidate.model_copy(
                update={
                    "metadata": candidate.metadata.model_copy(
                        update={"pending_link_with": None}
                    )
                }
            )
            await self.user_service.record_login(candidate, ctx.new_trust)
            logfire.info("Pending link auto-verified", link_id=str(edge.id))
            return await self._success(ctx, primary, touch=False)

        candidate = await self.user_service.record_login(candidate, ctx.new_trust)
        return await self._pending(
            ctx,
            LoginOutcomeType.REQUIRES_VERIFICATION,
            primary,
            candidate,
            primary_trust,
            needs_verification=True,
        )

    async def _create_identity(self, ctx: _LoginContext) -> User:
        user = await self.user_service.create_identity(
            real_email=ctx.email,
            provider=ctx.request.provider,
            trust=ctx.new_trust,
            provider_user_id=ctx.request.provider_user_id,
            display_name=ctx.request.display_name,
            avatar_url=ctx.request.avatar_url,
        )
        await self.audit_service.record(
            AuditAction.ACCOUNT_CREATED,
            user.id,
            performed_by=user.id,
            provider=user.provider.value,
            trust_score=ctx.new_trust.trust_score,
        )
        return user

    async def _success(
        self, ctx: _LoginContext, user: User, touch: bool = True
    ) -> ProviderLoginResponse:
        if touch:
            user = await self.user_service.record_login(user, ctx.new_trust)
        issued = await self.token_issuer.issue_for(user)
        logfire.info(
            "Login succeeded",
            user_id=str(issued.primary.id),
            provider=ctx.request.provider.value,
            linked_count=len(issued.linked_user_ids),
        )
        return ProviderLoginResponse(
            type=LoginOutcomeType.SUCCESS,
            token=issued.token,
            user=IdentitySummary.of(issued.primary),
            linked_user_ids=[str(i) for i in issued.linked_user_ids],
            redirect_url=build_redirect_url(
                self.settings.auth,
                ctx.request.provider,
                ctx.request.client_port,
                {"token": issued.token, "type": LoginOutcomeType.SUCCESS.value},
            ),
        )

    async def _pending(
        self,
        ctx: _LoginContext,
        outcome: LoginOutcomeType,
        primary: User,
        candidate: User,
        primary_trust: ProviderTrust,
        needs_verification: bool,
    ) -> ProviderLoginResponse:
        if candidate.metadata.pending_link_with != primary.id:
            candidate = await self.user_service.save(
                candidate.model_copy(
                    update={
                        "metadata": candidate.metadata.model_copy(
                            update={"pending_link_with": primary.id}
                        )
                    }
                )
            )

        trust_level = combined_trust_level(primary_trust, ctx.new_trust)
        linking_token = self.jwt_service.create_linking_token(
            primary_user_id=str(primary.id),
            new_user_id=str(candidate.id),
            email=ctx.email,
            primary_provider=primary.provider.value,
            new_provider=candidate.provider.value,
            requires_verification=needs_verification,
            trust_level=trust_level.value,
        )
        linking = LinkingData(
            primary_user_id=str(primary.id),
            new_user_id=str(candidate.id),
            email=ctx.email,
            primary_provider=primary.provider,
            new_provider=candidate.provider,
            requires_verification=needs_verification,
            trust_level=trust_level,
            linking_token=linking_token,
        )

        if needs_verification:
            dispatch = await self.linking_code_service.send(
                primary_user_id=primary.id,
                email=ctx.email,
                existing_provider=primary.provider,
                new_provider=candidate.provider,
                linked_user_id=candidate.id,
            )
            linking.verification_code_sent = dispatch.sent
            linking.wait_minutes = dispatch.wait_minutes

        scoped = self.token_issuer.issue_scoped(candidate)
        logfire.info(
            "Login requires account linking",
            outcome=outcome.value,
            primary_user_id=str(primary.id),
            new_user_id=str(candidate.id),
            trust_level=trust_level.value,
        )
        return ProviderLoginResponse(
            type=outcome,
            token=scoped.token,
            user=IdentitySummary.of(candidate),
            linked_user_ids=[str(candidate.id)],
            linking=linking,
            redirect_url=build_redirect_url(
                self.settings.auth,
                ctx.request.provider,
                ctx.request.client_port,
                {
                    "token": scoped.token,
                    "type": outcome.value,
                    "linking_token": linking_token,
                    "email": ctx.email,
                },
            ),
        )
