from __future__ import annotations

import os

import pytest
from fastapi.responses import RedirectResponse
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

# Configuration is read at import time, so it has to be in place first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test_secret_key_with_at_least_32_characters"
os.environ["JWT_SECRET"] = "test_jwt_secret_with_at_least_32_characters"
os.environ["ALLOWED_ORIGIN"] = "https://portfolio.example"
os.environ["FRONTEND_ORIGIN"] = "https://portfolio.example"
os.environ["AUTH_FAILURE_REDIRECT"] = "/"
os.environ["ENV"] = "test"
for _name in ("GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET", "GITHUB_CLIENT_ID", "GITHUB_CLIENT_SECRET"):
    os.environ.pop(_name, None)

from portfolio_api.app import create_app  # noqa: E402
from portfolio_api.core import engine  # noqa: E402
from portfolio_api.models import IdentityProvider  # noqa: E402
from portfolio_api.services.identity import (  # noqa: E402
    IdentityProviderError,
    NormalizedProfile,
)

FRONTEND_ORIGIN = "https://portfolio.example"


class FakeIdentityAdapter:
    """Stands in for the OAuth providers; profiles are queued per provider."""

    providers = ["google", "github"]

    def __init__(self) -> None:
        self.profiles: dict[str, NormalizedProfile] = {}
        self.denied: set[str] = set()

    def is_enabled(self, name: str) -> bool:
        return name in self.providers

    async def authorize_redirect(self, request, name: str):
        return RedirectResponse(f"https://{name}.example/authorize", status_code=302)

    async def fetch_profile(self, request, name: str) -> NormalizedProfile:
        if name in self.denied or name not in self.profiles:
            raise IdentityProviderError("access_denied")
        return self.profiles[name]


def make_profile(
    provider: IdentityProvider = IdentityProvider.GOOGLE,
    provider_id: str = "google-123",
    name: str = "Ada Lovelace",
    email: str | None = "ada@example.com",
    avatar_url: str | None = "https://img.example/ada.png",
) -> NormalizedProfile:
    return NormalizedProfile(
        provider=provider,
        provider_id=provider_id,
        name=name,
        email=email,
        avatar_url=avatar_url,
    )


@pytest.fixture(autouse=True)
def clean_db():
    # Ensure a clean slate for each test
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield


@pytest.fixture
def db_session():
    with Session(engine) as session:
        yield session


@pytest.fixture
def identity() -> FakeIdentityAdapter:
    return FakeIdentityAdapter()


@pytest.fixture
def client(identity: FakeIdentityAdapter) -> TestClient:
    return TestClient(create_app(identity=identity))
