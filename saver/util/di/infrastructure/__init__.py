"""Infrastructure providers."""

# Import bases
from .email import EmailProvider
from .github import GitHubProvider
from .google import GoogleProvider
from .oauth import OAuthAggregatorProvider
from .persistence import PersistenceProvider

# Import implementations (needed for __subclasses__())
from .email import ProdEmailProvider  # noqa: F401
from .github import ProdGitHubProvider  # noqa: F401
from .google import ProdGoogleProvider  # noqa: F401
from .persistence import ProdPersistenceProvider  # noqa: F401

__all__ = [
    "EmailProvider",
    "GitHubProvider",
    "GoogleProvider",
    "OAuthAggregatorProvider",
    "PersistenceProvider",
    "ProdEmailProvider",
    "ProdGitHubProvider",
    "ProdGoogleProvider",
    "ProdPersistenceProvider",
]
