"""Unit tests for shared use case helpers."""

import pytest

from saver.application.usecase.common import (
    build_redirect_url,
    normalize_email,
    parse_client_port,
)
from saver.config import AuthSettings
from saver.domain.error import ValidationError
from saver.domain.value import AuthProvider


class TestParseClientPort:
    @pytest.mark.parametrize(
        "state,port",
        [
            ("3f2a9c_19858", 19858),
            ("a_b_3000", 3000),
            ("nounderscore", None),
            ("abc_", None),
            ("abc_port", None),
            ("abc_0", None),
            ("abc_70000", None),
            (None, None),
            ("", None),
        ],
    )
    def test_parse(self, state, port):
        assert parse_client_port(state) == port


class TestBuildRedirectUrl:
    @pytest.fixture
    def settings(self):
        return AuthSettings(
            jwt_secret="test-secret-key-with-at-least-32-characters",
            desktop_redirect_url="http://localhost:19858",
        )

    def test_with_port(self, settings):
        url = build_redirect_url(
            settings, AuthProvider.GITHUB, 4000, {"token": "t", "type": "success"}
        )

        assert url == "http://localhost:4000/auth/callback/github?token=t&type=success"

    def test_without_port_uses_desktop_url(self, settings):
        url = build_redirect_url(settings, AuthProvider.GOOGLE, None, {"error": "auth_failed"})

        assert url == "http://localhost:19858?error=auth_failed"

    def test_empty_values_dropped_and_escaped(self, settings):
        url = build_redirect_url(
            settings,
            AuthProvider.GOOGLE,
            None,
            {"token": None, "email": "a+b@co.com", "message": ""},
        )

        assert url == "http://localhost:19858?email=a%2Bb%40co.com"


class TestNormalizeEmail:
    def test_trims_and_lowercases(self):
        assert normalize_email("  Pat@Example.COM ") == "pat@example.com"

    @pytest.mark.parametrize("value", ["", "pat", "pat@", "@example.com", "pat example.com"])
    def test_rejects_malformed(self, value):
        with pytest.raises(ValidationError):
            normalize_email(value)
