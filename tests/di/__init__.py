"""Mock providers for testing."""

from .email import MockEmailProvider
from .oauth import MockGitHubProvider, MockGoogleProvider
from .persistence import MockPersistenceProvider
from .container import build_test_container

__all__ = [
    "MockEmailProvider",
    "MockGitHubProvider",
    "MockGoogleProvider",
    "MockPersistenceProvider",
    "build_test_container",
]
