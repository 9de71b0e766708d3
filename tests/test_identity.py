from __future__ import annotations

import asyncio
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from authlib.integrations.starlette_client import OAuthError
from fastapi.testclient import TestClient
from sqlmodel import select

from portfolio_api.app import create_app
from portfolio_api.core.security import verify_token
from portfolio_api.models import IdentityProvider, User
from portfolio_api.services import identity
from portfolio_api.services.identity import (
    IdentityProviderAdapter,
    IdentityProviderError,
    ProfileError,
    ProviderConfig,
    build_provider_configs,
    github_profile,
    google_profile,
)


def _github_config() -> ProviderConfig:
    return ProviderConfig(
        name=IdentityProvider.GITHUB,
        client_id="gh-client",
        client_secret="gh-secret",
        callback_url="http://testserver/auth/github/callback",
    )


def test_google_profile_reads_oidc_claims():
    profile = google_profile(
        {"sub": "1234", "name": "Ada", "email": "ada@example.com", "picture": "https://img/ada"}
    )

    assert profile.provider is IdentityProvider.GOOGLE
    assert profile.provider_id == "1234"
    assert profile.name == "Ada"
    assert profile.email == "ada@example.com"
    assert profile.avatar_url == "https://img/ada"


def test_google_profile_name_falls_back_to_email_local_part():
    profile = google_profile({"sub": "1234", "email": "ada@example.com"})

    assert profile.name == "ada"
    assert profile.avatar_url is None


def test_google_profile_without_subject_is_rejected():
    with pytest.raises(ProfileError):
        google_profile({"email": "ada@example.com"})


def test_github_profile_prefers_primary_verified_email():
    profile = github_profile(
        {"id": 42, "login": "ada", "name": None, "email": "public@example.com", "avatar_url": "https://gh/ada"},
        [
            {"email": "old@example.com", "primary": False, "verified": True},
            {"email": "unverified@example.com", "primary": True, "verified": False},
            {"email": "main@example.com", "primary": True, "verified": True},
        ],
    )

    assert profile.provider is IdentityProvider.GITHUB
    assert profile.provider_id == "42"
    assert profile.name == "ada"
    assert profile.email == "main@example.com"
    assert profile.avatar_url == "https://gh/ada"


def test_github_profile_falls_back_to_public_email():
    profile = github_profile({"id": 42, "login": "ada", "email": "public@example.com"}, [])

    assert profile.email == "public@example.com"


def test_github_profile_without_id_is_rejected():
    with pytest.raises(ProfileError):
        github_profile({"login": "ada"})


def test_build_provider_configs_skips_missing_credentials(monkeypatch):
    monkeypatch.setattr(identity, "GOOGLE_CLIENT_ID", "g-id")
    monkeypatch.setattr(identity, "GOOGLE_CLIENT_SECRET", "g-secret")
    monkeypatch.setattr(identity, "GITHUB_CLIENT_ID", "gh-id")
    monkeypatch.setattr(identity, "GITHUB_CLIENT_SECRET", None)

    configs = build_provider_configs("https://api.example/")

    assert list(configs) == [IdentityProvider.GOOGLE]
    assert configs[IdentityProvider.GOOGLE].callback_url == "https://api.example/auth/google/callback"
    assert configs[IdentityProvider.GOOGLE].client_id == "g-id"


def test_adapter_only_enables_configured_providers():
    adapter = IdentityProviderAdapter({IdentityProvider.GITHUB: _github_config()})

    assert adapter.providers == ["github"]
    assert adapter.is_enabled("github")
    assert not adapter.is_enabled("google")
    assert not adapter.is_enabled("me")


def test_adapter_refuses_unconfigured_provider():
    adapter = IdentityProviderAdapter({})

    with pytest.raises(IdentityProviderError):
        asyncio.run(adapter.fetch_profile(None, "google"))


def test_github_login_redirects_into_provider_flow():
    adapter = IdentityProviderAdapter({IdentityProvider.GITHUB: _github_config()})
    client = TestClient(create_app(identity=adapter))

    response = client.get("/auth/github", follow_redirects=False)

    assert response.status_code == 302
    location = urlparse(response.headers["location"])
    query = parse_qs(location.query)
    assert f"{location.scheme}://{location.netloc}{location.path}" == "https://github.com/login/oauth/authorize"
    assert query["client_id"] == ["gh-client"]
    assert query["redirect_uri"] == ["http://testserver/auth/github/callback"]
    assert query["response_type"] == ["code"]
    assert query["state"]


def test_github_callback_with_bad_state_redirects_to_failure():
    adapter = IdentityProviderAdapter({IdentityProvider.GITHUB: _github_config()})
    client = TestClient(create_app(identity=adapter))

    response = client.get(
        "/auth/github/callback", params={"code": "abc", "state": "forged"}, follow_redirects=False
    )

    assert response.status_code == 302
    assert response.headers["location"] == "/"


def test_github_callback_when_user_denies_access(db_session):
    adapter = IdentityProviderAdapter({IdentityProvider.GITHUB: _github_config()})
    client = TestClient(create_app(identity=adapter))

    response = client.get(
        "/auth/github/callback",
        params={"error": "access_denied", "error_description": "The user has denied your application access."},
        follow_redirects=False,
    )

    assert response.status_code == 302
    assert response.headers["location"] == "/"
    assert db_session.exec(select(User)).all() == []


def _google_config() -> ProviderConfig:
    return ProviderConfig(
        name=IdentityProvider.GOOGLE,
        client_id="g-client",
        client_secret="g-secret",
        callback_url="http://testserver/auth/google/callback",
    )


def _github_api(responses: dict[str, httpx.Response]):
    """Serve canned GitHub API responses keyed by path."""

    async def get(path, token=None, **kwargs):
        assert token == {"access_token": "gh-token"}
        return responses[path]

    return get


def _json_response(status_code: int, path: str, payload) -> httpx.Response:
    return httpx.Response(
        status_code, json=payload, request=httpx.Request("GET", f"https://api.github.com/{path}")
    )


def _stub_github(monkeypatch, adapter: IdentityProviderAdapter, responses) -> None:
    client = adapter.client("github")

    async def authorize_access_token(request):
        return {"access_token": "gh-token"}

    monkeypatch.setattr(client, "authorize_access_token", authorize_access_token)
    monkeypatch.setattr(client, "get", _github_api(responses))


def test_google_fetch_profile_uses_id_token_claims(monkeypatch):
    adapter = IdentityProviderAdapter({IdentityProvider.GOOGLE: _google_config()})
    client = adapter.client("google")

    async def authorize_access_token(request):
        return {"access_token": "g-token", "userinfo": {"sub": "77", "name": "Ada", "email": "ada@example.com"}}

    async def userinfo(**kwargs):
        raise AssertionError("userinfo endpoint should not be called")

    monkeypatch.setattr(client, "authorize_access_token", authorize_access_token)
    monkeypatch.setattr(client, "userinfo", userinfo)

    profile = asyncio.run(adapter.fetch_profile(None, "google"))

    assert (profile.provider, profile.provider_id, profile.name) == (IdentityProvider.GOOGLE, "77", "Ada")
    assert profile.email == "ada@example.com"


def test_google_fetch_profile_falls_back_to_userinfo_endpoint(monkeypatch):
    adapter = IdentityProviderAdapter({IdentityProvider.GOOGLE: _google_config()})
    client = adapter.client("google")
    seen = {}

    async def authorize_access_token(request):
        return {"access_token": "g-token"}

    async def userinfo(token=None, **kwargs):
        seen["token"] = token
        return {"sub": "78", "email": "grace@example.com"}

    monkeypatch.setattr(client, "authorize_access_token", authorize_access_token)
    monkeypatch.setattr(client, "userinfo", userinfo)

    profile = asyncio.run(adapter.fetch_profile(None, "google"))

    assert seen["token"] == {"access_token": "g-token"}
    assert (profile.provider_id, profile.name) == ("78", "grace")


def test_github_fetch_profile_reads_user_and_emails(monkeypatch):
    adapter = IdentityProviderAdapter({IdentityProvider.GITHUB: _github_config()})
    _stub_github(
        monkeypatch,
        adapter,
        {
            "user": _json_response(200, "user", {"id": 42, "login": "ada", "name": "Ada", "email": None}),
            "user/emails": _json_response(
                200, "user/emails", [{"email": "main@example.com", "primary": True, "verified": True}]
            ),
        },
    )

    profile = asyncio.run(adapter.fetch_profile(None, "github"))

    assert (profile.provider, profile.provider_id, profile.name) == (IdentityProvider.GITHUB, "42", "Ada")
    assert profile.email == "main@example.com"


def test_github_fetch_profile_without_email_scope_uses_public_email(monkeypatch):
    adapter = IdentityProviderAdapter({IdentityProvider.GITHUB: _github_config()})
    _stub_github(
        monkeypatch,
        adapter,
        {
            "user": _json_response(200, "user", {"id": 42, "login": "ada", "email": "public@example.com"}),
            "user/emails": _json_response(404, "user/emails", {"message": "Not Found"}),
        },
    )

    profile = asyncio.run(adapter.fetch_profile(None, "github"))

    assert profile.email == "public@example.com"


def test_github_user_endpoint_failure_becomes_provider_error(monkeypatch):
    adapter = IdentityProviderAdapter({IdentityProvider.GITHUB: _github_config()})
    _stub_github(
        monkeypatch,
        adapter,
        {"user": _json_response(401, "user", {"message": "Bad credentials"})},
    )

    with pytest.raises(IdentityProviderError):
        asyncio.run(adapter.fetch_profile(None, "github"))


def test_github_profile_without_id_becomes_provider_error(monkeypatch):
    adapter = IdentityProviderAdapter({IdentityProvider.GITHUB: _github_config()})
    _stub_github(
        monkeypatch,
        adapter,
        {
            "user": _json_response(200, "user", {"login": "ada"}),
            "user/emails": _json_response(200, "user/emails", []),
        },
    )

    with pytest.raises(IdentityProviderError):
        asyncio.run(adapter.fetch_profile(None, "github"))


def test_token_exchange_failure_becomes_provider_error(monkeypatch):
    adapter = IdentityProviderAdapter({IdentityProvider.GITHUB: _github_config()})
    client = adapter.client("github")

    async def authorize_access_token(request):
        raise OAuthError(error="bad_verification_code", description="The code passed is incorrect or expired.")

    monkeypatch.setattr(client, "authorize_access_token", authorize_access_token)

    with pytest.raises(IdentityProviderError):
        asyncio.run(adapter.fetch_profile(None, "github"))


def test_github_callback_signs_in_through_real_adapter(monkeypatch, db_session):
    adapter = IdentityProviderAdapter({IdentityProvider.GITHUB: _github_config()})
    _stub_github(
        monkeypatch,
        adapter,
        {
            "user": _json_response(200, "user", {"id": 42, "login": "ada", "avatar_url": "https://gh/ada"}),
            "user/emails": _json_response(
                200, "user/emails", [{"email": "main@example.com", "primary": True, "verified": True}]
            ),
        },
    )
    client = TestClient(create_app(identity=adapter))

    response = client.get("/auth/github/callback", params={"code": "abc"}, follow_redirects=False)

    assert response.status_code == 302
    token = parse_qs(urlparse(response.headers["location"]).query)["token"][0]
    user = db_session.exec(select(User)).one()
    assert (user.provider, user.provider_id, user.email) == ("github", "42", "main@example.com")
    assert verify_token(token) == str(user.id)
