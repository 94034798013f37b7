"""Account linking use cases."""

from .complete_oauth_link import CompleteOAuthLinkRequest, CompleteOAuthLinkUseCase
from .initiate_link import (
    InitiateLinkRequest,
    InitiateLinkResponse,
    InitiateLinkUseCase,
)
from .list_linked_accounts import (
    LinkedAccountView,
    ListLinkedAccountsResponse,
    ListLinkedAccountsUseCase,
)
from .resend_linking_code import (
    ResendLinkingCodeRequest,
    ResendLinkingCodeResponse,
    ResendLinkingCodeUseCase,
)
from .set_primary_account import SetPrimaryAccountRequest, SetPrimaryAccountUseCase
from .unlink_account import UnlinkAccountRequest, UnlinkAccountUseCase
from .verify_link import VerifyLinkRequest, VerifyLinkUseCase

__all__ = [
    "CompleteOAuthLinkRequest",
    "CompleteOAuthLinkUseCase",
    "InitiateLinkRequest",
    "InitiateLinkResponse",
    "InitiateLinkUseCase",
    "LinkedAccountView",
    "ListLinkedAccountsResponse",
    "ListLinkedAccountsUseCase",
    "ResendLinkingCodeRequest",
    "ResendLinkingCodeResponse",
    "ResendLinkingCodeUseCase",
    "SetPrimaryAccountRequest",
    "SetPrimaryAccountUseCase",
    "UnlinkAccountRequest",
    "UnlinkAccountUseCase",
    "VerifyLinkRequest",
    "VerifyLinkUseCase",
]
