"""API dependencies."""

from fisiohub.api.dependencies.auth import (
    CurrentIdentity,
    Resolver,
    get_identity_store,
    get_tenant_resolver,
    require_access,
)
from fisiohub.api.dependencies.database import (
    AppSettings,
    DbSession,
    Hasher,
    Tokens,
    get_db,
)

__all__ = [
    "AppSettings",
    "CurrentIdentity",
    "DbSession",
    "Hasher",
    "Resolver",
    "Tokens",
    "get_db",
    "get_identity_store",
    "get_tenant_resolver",
    "require_access",
]
