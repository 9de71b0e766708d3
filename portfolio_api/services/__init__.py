"""Service layer helpers."""

from .identity import (
    IdentityProviderAdapter,
    IdentityProviderError,
    NormalizedProfile,
    ProviderConfig,
    build_provider_configs,
)
from .resources import ResourceStore, blog_posts, messages, projects
from .users import get_user, resolve_or_create, user_to_dict

__all__ = [
    "IdentityProviderAdapter",
    "IdentityProviderError",
    "NormalizedProfile",
    "ProviderConfig",
    "ResourceStore",
    "blog_posts",
    "build_provider_configs",
    "get_user",
    "messages",
    "projects",
    "resolve_or_create",
    "user_to_dict",
]
