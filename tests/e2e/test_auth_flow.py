"""End-to-end tests for authentication."""

from urllib.parse import parse_qs, urlparse

from tests.harness import bearer, create_client_fixture, mock_email_sender

# E2E test fixture
client = create_client_fixture()

BROWSER_UA = "Mozilla/5.0 (X11; Linux x86_64) Gecko/20100101 Firefox/128.0"


def register(client, email: str = "hana@example.com", password: str = "long enough"):
    return client.post("/auth/register", json={"email": email, "password": password})


def oauth_callback(client, provider: str, code: str, state: str = "f00d_3000", **kwargs):
    headers = kwargs.pop("headers", {"User-Agent": BROWSER_UA})
    return client.get(
        f"/auth/callback/{provider}",
        params={"code": code, "state": state},
        headers=headers,
        follow_redirects=False,
    )


def redirect_params(response) -> tuple[str, dict[str, str]]:
    location = urlparse(response.headers["location"])
    query = {k: v[0] for k, v in parse_qs(location.query).items()}
    return f"{location.scheme}://{location.netloc}{location.path}", query


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["environment"] == "test"


class TestLocalAuth:
    """Register, login, and token checks over HTTP."""

    def test_register_then_me(self, client):
        # Act
        registered = register(client)
        me = client.get("/auth/me", headers=bearer(registered.json()["token"]))

        # Assert
        assert registered.status_code == 201
        assert me.status_code == 200
        data = me.json()
        assert data["email"] == "hana@example.com"
        assert data["provider"] == "local"
        assert data["linked_user_ids"] == [data["user_id"]]

    def test_duplicate_registration_conflicts(self, client):
        register(client)

        response = register(client)

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    def test_short_password_is_bad_request(self, client):
        response = register(client, password="short")

        assert response.status_code == 400
        assert response.json()["error"] == "validation_failed"

    def test_login(self, client):
        register(client)

        response = client.post(
            "/auth/login", json={"email": "hana@example.com", "password": "long enough"}
        )

        assert response.status_code == 200
        assert response.json()["user"]["provider"] == "local"

    def test_login_with_wrong_password(self, client):
        register(client)

        response = client.post(
            "/auth/login", json={"email": "hana@example.com", "password": "not it at all"}
        )

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_verify_token(self, client):
        token = register(client).json()["token"]

        response = client.get("/auth/verify", headers=bearer(token))

        assert response.status_code == 200
        assert response.json()["valid"] is True

    def test_me_without_token(self, client):
        response = client.get("/auth/me")

        assert response.status_code == 401
        assert response.json()["error"] == "unauthenticated"

    def test_me_with_garbage_token(self, client):
        response = client.get("/auth/me", headers=bearer("not.a.token"))

        assert response.status_code == 401
        assert response.json()["error"] == "invalid_token"

    def test_me_with_non_bearer_scheme(self, client):
        response = client.get("/auth/me", headers={"Authorization": "Basic abc"})

        assert response.status_code == 401


class TestAuthorizationUrl:
    """Tests for GET /auth/{provider}/url."""

    def test_url_carries_port_in_state(self, client):
        response = client.get("/auth/google/url", params={"port": 19858})

        assert response.status_code == 200
        data = response.json()
        assert data["state"].endswith("_19858")
        assert f"state={data['state']}" in data["url"]

    def test_port_required(self, client):
        response = client.get("/auth/github/url")

        assert response.status_code == 400
        assert response.json()["error"] == "validation_failed"

    def test_port_out_of_range(self, client):
        response = client.get("/auth/github/url", params={"port": 70000})

        assert response.status_code == 400

    def test_unsupported_provider(self, client):
        response = client.get("/auth/myspace/url", params={"port": 3000})

        assert response.status_code == 400


class TestOAuthCallback:
    """Tests for GET /auth/callback/{provider}."""

    def test_new_user_redirected_with_token(self, client):
        # Act
        response = oauth_callback(client, "google", "ivan@gmail.com")

        # Assert
        assert response.status_code == 302
        base, params = redirect_params(response)
        assert base == "http://localhost:3000/auth/callback/google"
        assert params["type"] == "success"
        me = client.get("/auth/me", headers=bearer(params["token"]))
        assert me.json()["email"] == "ivan@gmail.com"

    def test_security_headers_on_redirect(self, client):
        response = oauth_callback(client, "github", "ivan@gmail.com")

        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["X-Content-Type-Options"] == "nosniff"

    def test_bot_gets_bare_not_found(self, client):
        response = oauth_callback(
            client, "google", "ivan@gmail.com", headers={"User-Agent": "curl/8.4.0"}
        )

        assert response.status_code == 404
        assert response.text == "Not Found"
        assert response.headers["X-Frame-Options"] == "DENY"

    def test_missing_code_gets_bare_not_found(self, client):
        response = client.get(
            "/auth/callback/google",
            params={"state": "f00d_3000"},
            headers={"User-Agent": BROWSER_UA},
            follow_redirects=False,
        )

        assert response.status_code == 404
        assert response.text == "Not Found"

    def test_unknown_provider_gets_bare_not_found(self, client):
        response = oauth_callback(client, "myspace", "ivan@gmail.com")

        assert response.status_code == 404

    def test_state_without_port_uses_desktop_url(self, client):
        response = oauth_callback(client, "google", "ivan@gmail.com", state="f00d")

        base, params = redirect_params(response)
        assert base == "http://localhost:19858"
        assert params["type"] == "success"

    def test_same_email_pending_link_reported_in_redirect(self, client):
        """A fresh local account makes a Google login wait for a code."""
        # Arrange
        register(client, email="judy@co.com")

        # Act
        response = oauth_callback(client, "google", "judy@co.com")

        # Assert
        sender = mock_email_sender(client)
        _, params = redirect_params(response)
        assert params["type"] == "requires_verification"
        assert params["email"] == "judy@co.com"
        assert "linking_token" in params
        assert sender.last_code("judy@co.com") is not None
