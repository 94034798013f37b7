"""Provider trust evaluation.

Pure functions: no I/O, no clock unless one is passed in. Everything that
decides how cautious to be about merging two identities lives here.
"""

from datetime import datetime, timedelta

from saver.domain.model.common import utc_now
from saver.domain.model.user import User
from saver.domain.value import AuthProvider, ProviderTrust, TrustLevel

# Consumer webmail domains. Anything else counts as an enterprise domain.
CONSUMER_EMAIL_DOMAINS = frozenset(
    {
        "gmail.com",
        "googlemail.com",
        "yahoo.com",
        "hotmail.com",
        "outlook.com",
        "live.com",
        "icloud.com",
        "me.com",
        "aol.com",
        "protonmail.com",
        "proton.me",
    }
)

ENTERPRISE_DOMAIN_BONUS = 10
DEFAULT_TRUST_SCORE = 50

# Providers able to assert an organisation's identity (Workspace, Entra ID)
SSO_PROVIDERS = frozenset({AuthProvider.GOOGLE, AuthProvider.MICROSOFT})

# Verification predicate thresholds
AUTO_VERIFY_SCORE = 90
MIN_NEW_PROVIDER_SCORE = 70
YOUNG_ACCOUNT_AGE = timedelta(hours=24)
YOUNG_ACCOUNT_MIN_SCORE = 80


def _base_score(provider: AuthProvider) -> int:
    match provider:
        case AuthProvider.GOOGLE | AuthProvider.MICROSOFT:
            return 80
        case AuthProvider.LOCAL:
            return 70
        case AuthProvider.GITHUB:
            return 60
        case AuthProvider.PASSKEY:
            return DEFAULT_TRUST_SCORE


def _provider_verifies_email(provider: AuthProvider, reported: bool | None) -> bool:
    match provider:
        case AuthProvider.GITHUB:
            # GitHub returns unverified addresses; trust only its own flag
            return bool(reported)
        case (
            AuthProvider.LOCAL
            | AuthProvider.GOOGLE
            | AuthProvider.MICROSOFT
            | AuthProvider.PASSKEY
        ):
            return True


def email_domain(email: str) -> str:
    """Lowercased domain part of an email address ("" if there is none)."""
    _, at, domain = email.strip().lower().rpartition("@")
    return domain if at else ""


def is_enterprise_domain(email: str) -> bool:
    """Whether the email belongs to a non-webmail domain."""
    domain = email_domain(email)
    return bool(domain) and domain not in CONSUMER_EMAIL_DOMAINS


def evaluate_provider_trust(
    provider: AuthProvider, email: str, email_verified: bool | None = None
) -> ProviderTrust:
    """Score how far a (provider, email) pair can be believed.

    Args:
        provider: Authentication provider
        email: Email reported for the identity
        email_verified: Provider-reported verification flag (only GitHub's
            is consulted)

    Returns:
        Trust evaluation with a 0-100 score
    """
    enterprise = is_enterprise_domain(email)
    sso_capable = provider in SSO_PROVIDERS

    score = _base_score(provider)
    if enterprise and sso_capable:
        score += ENTERPRISE_DOMAIN_BONUS

    return ProviderTrust(
        email_verified=_provider_verifies_email(provider, email_verified),
        domain_verified=enterprise,
        enterprise_sso=enterprise and sso_capable,
        trust_score=min(score, 100),
    )


def evaluate_user_trust(user: User) -> ProviderTrust:
    """Trust evaluation for an existing identity."""
    return evaluate_provider_trust(user.provider, user.real_email, user.email_verified)


def requires_verification(
    primary_trust: ProviderTrust,
    new_trust: ProviderTrust,
    primary_account: User,
    now: datetime | None = None,
) -> bool:
    """Decide whether merging two identities needs an emailed code.

    Args:
        primary_trust: Evaluation of the anchor identity
        new_trust: Evaluation of the identity being linked
        primary_account: Anchor identity record (its age matters)
        now: Current time, for deterministic tests

    Returns:
        True when the link must be confirmed with a one-time code
    """
    if primary_trust.enterprise_sso and new_trust.enterprise_sso:
        return False
    if (
        primary_trust.trust_score >= AUTO_VERIFY_SCORE
        and new_trust.trust_score >= AUTO_VERIFY_SCORE
    ):
        return False

    if not primary_trust.email_verified or not new_trust.email_verified:
        return True
    if new_trust.trust_score < MIN_NEW_PROVIDER_SCORE:
        return True
    if (
        primary_account.is_younger_than(YOUNG_ACCOUNT_AGE, now or utc_now())
        and primary_trust.trust_score < YOUNG_ACCOUNT_MIN_SCORE
    ):
        return True

    return False


def combined_trust_level(primary_trust: ProviderTrust, new_trust: ProviderTrust) -> TrustLevel:
    """Bucket the average of two trust scores."""
    average = (primary_trust.trust_score + new_trust.trust_score) / 2
    if average >= 85:
        return TrustLevel.HIGH
    if average >= 70:
        return TrustLevel.MEDIUM
    return TrustLevel.LOW
