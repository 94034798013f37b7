"""Account linking routes.

Every route here requires a bearer token. The caller is resolved against
the linked-account graph on each request, so links made or removed since
the token was issued are already in effect.
"""

import logging
from uuid import UUID

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Header

from saver.application.usecase.auth import AuthenticateRequestUseCase
from saver.application.usecase.common import TokenResponse
from saver.application.usecase.linking import (
    CompleteOAuthLinkRequest,
    CompleteOAuthLinkUseCase,
    InitiateLinkRequest,
    InitiateLinkResponse,
    InitiateLinkUseCase,
    ListLinkedAccountsResponse,
    ListLinkedAccountsUseCase,
    ResendLinkingCodeRequest,
    ResendLinkingCodeResponse,
    ResendLinkingCodeUseCase,
    SetPrimaryAccountRequest,
    SetPrimaryAccountUseCase,
    UnlinkAccountRequest,
    UnlinkAccountUseCase,
    VerifyLinkRequest,
    VerifyLinkUseCase,
)
from saver.domain.value import LinkedAccountId
from saver.interface.api.dependencies import current_identity

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/account-linking", tags=["account-linking"], route_class=DishkaRoute
)


@router.get("/linked", response_model=ListLinkedAccountsResponse)
async def list_linked_accounts(
    authenticate: FromDishka[AuthenticateRequestUseCase],
    use_case: FromDishka[ListLinkedAccountsUseCase],
    authorization: str | None = Header(default=None),
) -> ListLinkedAccountsResponse:
    """Identities in the caller's set and every edge touching them."""
    caller = await current_identity(authorization, authenticate)
    return await use_case.execute(caller)


@router.post("/link", response_model=InitiateLinkResponse, status_code=201)
async def initiate_link(
    request: InitiateLinkRequest,
    authenticate: FromDishka[AuthenticateRequestUseCase],
    use_case: FromDishka[InitiateLinkUseCase],
    authorization: str | None = Header(default=None),
) -> InitiateLinkResponse:
    """Propose a link to another identity and email it a code.

    Example:
        POST /account-linking/link
        {"target_email": "alice@co.com", "target_provider": "github"}
    """
    caller = await current_identity(authorization, authenticate)
    logger.info(f"Link requested by {caller.user_id}")
    return await use_case.execute(caller, request)


@router.post("/verify", response_model=TokenResponse)
async def verify_link(
    request: VerifyLinkRequest,
    authenticate: FromDishka[AuthenticateRequestUseCase],
    use_case: FromDishka[VerifyLinkUseCase],
    authorization: str | None = Header(default=None),
) -> TokenResponse:
    """Confirm a proposed link with the emailed code."""
    caller = await current_identity(authorization, authenticate)
    return await use_case.execute(caller, request)


@router.delete("/unlink/{link_id}", response_model=TokenResponse)
async def unlink_account(
    link_id: UUID,
    authenticate: FromDishka[AuthenticateRequestUseCase],
    use_case: FromDishka[UnlinkAccountUseCase],
    authorization: str | None = Header(default=None),
) -> TokenResponse:
    """Remove a link; the response token reflects the smaller set."""
    caller = await current_identity(authorization, authenticate)
    logger.info(f"Unlink of {link_id} requested by {caller.user_id}")
    return await use_case.execute(caller, UnlinkAccountRequest(link_id=LinkedAccountId(link_id)))


@router.post("/complete-oauth", response_model=TokenResponse)
async def complete_oauth_link(
    request: CompleteOAuthLinkRequest,
    use_case: FromDishka[CompleteOAuthLinkUseCase],
) -> TokenResponse:
    """Finish a merge proposed during OAuth login.

    Authorized by the linking token alone; the caller may not hold a bearer
    token for the primary identity yet.
    """
    return await use_case.execute(request)


@router.post("/resend-code", response_model=ResendLinkingCodeResponse)
async def resend_linking_code(
    request: ResendLinkingCodeRequest,
    use_case: FromDishka[ResendLinkingCodeUseCase],
) -> ResendLinkingCodeResponse:
    return await use_case.execute(request)


@router.post("/set-primary", response_model=TokenResponse)
async def set_primary_account(
    request: SetPrimaryAccountRequest,
    authenticate: FromDishka[AuthenticateRequestUseCase],
    use_case: FromDishka[SetPrimaryAccountUseCase],
    authorization: str | None = Header(default=None),
) -> TokenResponse:
    """Choose which identity future tokens are issued for."""
    caller = await current_identity(authorization, authenticate)
    return await use_case.execute(caller, request)
