"""Adapter DI providers."""

from dishka import Scope, provide

from saver.adapter.password import BcryptPasswordHasher
from saver.config import AuthSettings
from saver.domain.service import PasswordHasher
from saver.util.di.base import ProviderBase


class ProdAdapterProvider(ProviderBase):
    """Stateless adapters with no external service behind them."""

    scope = Scope.APP

    @provide
    def get_password_hasher(self, auth_settings: AuthSettings) -> PasswordHasher:
        """Provide bcrypt password hasher."""
        return BcryptPasswordHasher(rounds=auth_settings.bcrypt_rounds)
