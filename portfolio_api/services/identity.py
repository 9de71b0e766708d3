"""OAuth2 login through external identity providers.

Each provider is registered on an adapter-owned Authlib registry from an
explicit :class:`ProviderConfig`. Provider profiles are translated into a
:class:`NormalizedProfile` so the rest of the application never sees the
provider-specific payloads.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional

import httpx
import structlog
from authlib.integrations.starlette_client import OAuth, OAuthError
from starlette.requests import Request
from starlette.responses import Response

from ..core.config import (
    CALLBACK_BASE_URL,
    GITHUB_CLIENT_ID,
    GITHUB_CLIENT_SECRET,
    GOOGLE_CLIENT_ID,
    GOOGLE_CLIENT_SECRET,
)
from ..models import IdentityProvider

logger = structlog.get_logger(__name__)


class IdentityProviderError(Exception):
    """Login through a provider failed or was denied."""


class ProfileError(IdentityProviderError):
    """The provider returned a profile without the fields we need."""


@dataclass(frozen=True)
class ProviderConfig:
    name: IdentityProvider
    client_id: str
    client_secret: str
    callback_url: str


@dataclass(frozen=True)
class NormalizedProfile:
    provider: IdentityProvider
    provider_id: str
    name: str
    email: Optional[str] = None
    avatar_url: Optional[str] = None


_REGISTRATION: Dict[IdentityProvider, Dict[str, Any]] = {
    IdentityProvider.GOOGLE: {
        "server_metadata_url": "https://accounts.google.com/.well-known/openid-configuration",
        "client_kwargs": {"scope": "openid email profile"},
    },
    IdentityProvider.GITHUB: {
        "authorize_url": "https://github.com/login/oauth/authorize",
        "access_token_url": "https://github.com/login/oauth/access_token",
        "api_base_url": "https://api.github.com/",
        "client_kwargs": {"scope": "read:user user:email"},
    },
}


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def google_profile(userinfo: Mapping[str, Any]) -> NormalizedProfile:
    """Translate OpenID Connect claims from Google."""

    sub = _text(userinfo.get("sub"))
    if not sub:
        raise ProfileError("Google profile has no subject")
    email = _text(userinfo.get("email"))
    name = _text(userinfo.get("name")) or (email.split("@")[0] if email else sub)
    return NormalizedProfile(
        provider=IdentityProvider.GOOGLE,
        provider_id=sub,
        name=name,
        email=email,
        avatar_url=_text(userinfo.get("picture")),
    )


def _primary_github_email(emails: Iterable[Any]) -> Optional[str]:
    for entry in emails:
        if isinstance(entry, dict) and entry.get("primary") and entry.get("verified"):
            return _text(entry.get("email"))
    return None


def github_profile(
    user: Mapping[str, Any], emails: Iterable[Any] = ()
) -> NormalizedProfile:
    """Translate the GitHub ``/user`` and ``/user/emails`` payloads."""

    github_id = _text(user.get("id"))
    if not github_id:
        raise ProfileError("GitHub profile has no id")
    login = _text(user.get("login"))
    return NormalizedProfile(
        provider=IdentityProvider.GITHUB,
        provider_id=github_id,
        name=_text(user.get("name")) or login or github_id,
        email=_primary_github_email(emails) or _text(user.get("email")),
        avatar_url=_text(user.get("avatar_url")),
    )


def build_provider_configs(
    base_url: str = CALLBACK_BASE_URL,
) -> Dict[IdentityProvider, ProviderConfig]:
    """Collect the providers whose credentials are present in the environment."""

    credentials = {
        IdentityProvider.GOOGLE: (GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET),
        IdentityProvider.GITHUB: (GITHUB_CLIENT_ID, GITHUB_CLIENT_SECRET),
    }
    configs: Dict[IdentityProvider, ProviderConfig] = {}
    for provider, (client_id, client_secret) in credentials.items():
        if not client_id or not client_secret:
            logger.warning("identity_provider_disabled", provider=provider.value)
            continue
        configs[provider] = ProviderConfig(
            name=provider,
            client_id=client_id,
            client_secret=client_secret,
            callback_url=f"{base_url.rstrip('/')}/auth/{provider.value}/callback",
        )
    return configs


class IdentityProviderAdapter:
    """Runs the authorization-code flow against the configured providers."""

    def __init__(self, configs: Mapping[IdentityProvider, ProviderConfig]) -> None:
        self._configs = {IdentityProvider(name): config for name, config in configs.items()}
        self._oauth = OAuth()
        for provider, config in self._configs.items():
            self._oauth.register(
                name=provider.value,
                client_id=config.client_id,
                client_secret=config.client_secret,
                **_REGISTRATION[provider],
            )
        self._profile_readers: Dict[
            IdentityProvider, Callable[[Any, Dict[str, Any]], Awaitable[NormalizedProfile]]
        ] = {
            IdentityProvider.GOOGLE: self._read_google,
            IdentityProvider.GITHUB: self._read_github,
        }

    @property
    def providers(self) -> List[str]:
        return [provider.value for provider in self._configs]

    def is_enabled(self, name: str) -> bool:
        return name in self.providers

    def _config(self, name: str) -> ProviderConfig:
        if not self.is_enabled(name):
            raise IdentityProviderError(f"Provider {name!r} is not configured")
        return self._configs[IdentityProvider(name)]

    def client(self, name: str) -> Any:
        """Return the Authlib client registered for provider ``name``."""

        return self._oauth.create_client(self._config(name).name.value)

    async def authorize_redirect(self, request: Request, name: str) -> Response:
        config = self._config(name)
        client = self.client(name)
        try:
            return await client.authorize_redirect(request, config.callback_url)
        except (OAuthError, httpx.HTTPError) as exc:
            raise IdentityProviderError(str(exc)) from exc

    async def fetch_profile(self, request: Request, name: str) -> NormalizedProfile:
        """Finish the flow on the callback request and return the profile."""

        config = self._config(name)
        client = self.client(name)
        try:
            token = await client.authorize_access_token(request)
            return await self._profile_readers[config.name](client, token)
        except (OAuthError, httpx.HTTPError, ValueError) as exc:
            raise IdentityProviderError(str(exc)) from exc

    async def _read_google(self, client: Any, token: Dict[str, Any]) -> NormalizedProfile:
        userinfo = token.get("userinfo") or await client.userinfo(token=token)
        return google_profile(userinfo)

    async def _read_github(self, client: Any, token: Dict[str, Any]) -> NormalizedProfile:
        user_response = await client.get("user", token=token)
        user_response.raise_for_status()
        emails: List[Any] = []
        emails_response = await client.get("user/emails", token=token)
        if emails_response.status_code == 200:
            emails = emails_response.json()
        return github_profile(user_response.json(), emails)


__all__ = [
    "IdentityProviderAdapter",
    "IdentityProviderError",
    "NormalizedProfile",
    "ProfileError",
    "ProviderConfig",
    "build_provider_configs",
    "github_profile",
    "google_profile",
]
