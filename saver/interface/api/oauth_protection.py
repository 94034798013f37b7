"""Guards for the public OAuth callback endpoints."""

import logging
import re

from fastapi import Response

logger = logging.getLogger(__name__)

BOT_USER_AGENT_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"bot",
        r"crawler",
        r"spider",
        r"scraper",
        r"scan",
        r"slurp",
        r"curl",
        r"wget",
        r"python",
        r"java",
        r"go-http-client",
        r"postman",
        r"insomnia",
    )
]

OAUTH_SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": "default-src 'self'; frame-ancestors 'none'; form-action 'self';",
}


def is_bot_user_agent(user_agent: str | None) -> bool:
    """True if the user agent looks like a crawler or scripted client."""
    if not user_agent:
        return False
    return any(p.search(user_agent) for p in BOT_USER_AGENT_PATTERNS)


def should_reject_callback(
    user_agent: str | None, code: str | None, state: str | None
) -> bool:
    """Whether an OAuth callback gets the bare 404 treatment.

    Scanners probe callback URLs without the provider's query parameters;
    a plain 404 gives them nothing to fingerprint.
    """
    is_bot = is_bot_user_agent(user_agent)
    if is_bot or not code or not state:
        logger.info(
            f"Rejecting OAuth callback: is_bot={is_bot}, "
            f"has_code={bool(code)}, has_state={bool(state)}"
        )
        return True
    return False


def bare_not_found() -> Response:
    return Response(content="Not Found", status_code=404, media_type="text/plain")


def apply_security_headers(response: Response) -> Response:
    """Add clickjacking, sniffing and CSP headers to an OAuth response."""
    for name, value in OAUTH_SECURITY_HEADERS.items():
        response.headers[name] = value
    return response
