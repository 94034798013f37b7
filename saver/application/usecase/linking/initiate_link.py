"""Initiate manual link use case."""

from datetime import datetime

import logfire
from pydantic import BaseModel

from saver.application.usecase.common import AuthenticatedIdentity, normalize_email
from saver.domain.error import ConflictError, NotFoundError, ValidationError
from saver.domain.service import (
    LinkedAccountService,
    LinkingCodeService,
    UserService,
)
from saver.domain.service.trust import evaluate_user_trust
from saver.domain.value import AuthProvider, LinkMethod

from .list_linked_accounts import LinkedAccountView


class InitiateLinkRequest(BaseModel):
    """Initiate link request."""

    target_email: str | None = None
    target_provider: AuthProvider | None = None


class InitiateLinkResponse(BaseModel):
    """Pending edge and code dispatch."""

    link: LinkedAccountView
    verification_code_sent: bool
    expires_at: datetime | None


class InitiateLinkUseCase:
    """Use case for proposing a link to another identity by email and provider.

    The code goes to the target identity's email; whoever can read it
    proves ownership of both sides.
    """

    def __init__(
        self,
        user_service: UserService,
        linked_account_service: LinkedAccountService,
        linking_code_service: LinkingCodeService,
    ) -> None:
        """Initialize initiate link use case.

        Args:
            user_service: User domain service
            linked_account_service: Linked account domain service
            linking_code_service: Linking code issuance and delivery
        """
        self.user_service = user_service
        self.linked_account_service = linked_account_service
        self.linking_code_service = linking_code_service

    async def execute(
        self, caller: AuthenticatedIdentity, request: InitiateLinkRequest
    ) -> InitiateLinkResponse:
        """Create (or reuse) an unverified edge and email a code.

        Raises:
            ValidationError: If the target email or provider is missing
            NotFoundError: If no identity matches the target
            ConflictError: If the target is the caller or already linked
            RateLimitedError: If too many codes were requested recently
        """
        if not request.target_email or request.target_provider is None:
            raise ValidationError("target_email and target_provider are required")
        email = normalize_email(request.target_email)

        target = await self.user_service.find_by_real_email(
            email, request.target_provider
        )
        if target is None:
            raise NotFoundError(
                "User", f"{email} ({request.target_provider.value})"
            )
        if target.id == caller.user_id:
            raise ConflictError("Cannot link an account to itself")
        if target.id in caller.linked_user_ids:
            raise ConflictError("Accounts are already linked")

        primary = await self.user_service.get_by_id(caller.primary_user_id)

        with logfire.span(
            "initiate_link",
            primary_user_id=str(primary.id),
            target_user_id=str(target.id),
        ):
            link = await self.linked_account_service.find_between(primary.id, target.id)
            if link is not None and link.verified:
                raise ConflictError("Accounts are already linked")
            if link is None:
                link = await self.linked_account_service.propose(
                    primary_user_id=primary.id,
                    linked_user_id=target.id,
                    method=LinkMethod.MANUAL,
                    verified=False,
                    primary_trust=evaluate_user_trust(primary),
                    new_trust=evaluate_user_trust(target),
                    performed_by=caller.user_id,
                )

            dispatch = await self.linking_code_service.send(
                primary_user_id=link.primary_user_id,
                email=target.real_email,
                existing_provider=primary.provider,
                new_provider=target.provider,
                linked_user_id=target.id,
                raise_when_limited=True,
            )
            link = await self.linked_account_service.record_code_recipient(
                link, target.real_email
            )

            return InitiateLinkResponse(
                link=LinkedAccountView.of(
                    link, primary.id, {primary.id: primary, target.id: target}
                ),
                verification_code_sent=dispatch.sent,
                expires_at=dispatch.expires_at,
            )
