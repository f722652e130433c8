"""Tenant resolution from the inbound request."""

import ipaddress
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional
from uuid import UUID

from starlette.requests import HTTPConnection

from fisiohub.core.errors import TenantNotFoundError
from fisiohub.models.base import utcnow
from fisiohub.models.tenant import Tenant
from fisiohub.services.identity_store import IdentityStore

logger = logging.getLogger(__name__)

# Path parameter used by routes mounted under /api/t/{tenant_slug}
TENANT_PATH_PARAM = "tenant_slug"


class TenantSignalSource(str, Enum):
    """Where the tenant key came from."""

    HOST = "host"
    PATH = "path"
    HEADER = "header"
    BODY = "body"
    TOKEN = "token"


@dataclass(frozen=True)
class TenantSignal:
    source: TenantSignalSource
    key: str


def split_host(host: Optional[str]) -> Optional[str]:
    """Lower-case host without port; None for empty hosts and IP literals."""
    if not host:
        return None
    host = host.strip().lower()
    if host.startswith("["):
        return None
    host = host.split(":", 1)[0]
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return host or None
    return None


class TenantResolver:
    """
    Maps a request to exactly one tenant.

    Signals, in priority order:
    1. Host: a tenant custom domain, or the first DNS label when the host
       has at least three labels and that label is not reserved
    2. Path: the ``tenant_slug`` path parameter
    3. Header: the configured override header (API clients bypassing DNS)

    The first signal present decides; lower-priority signals are ignored.
    Login and refresh may also name the tenant in their body, below all
    three.
    """

    def __init__(
        self,
        store: IdentityStore,
        header_name: str = "X-Tenant-Slug",
        reserved_subdomains: Iterable[str] = ("www", "api"),
    ) -> None:
        self.store = store
        self.header_name = header_name
        self.reserved_subdomains = frozenset(s.lower() for s in reserved_subdomains)

    def subdomain_label(self, host: str) -> Optional[str]:
        """Tenant label of ``clinic.example.com``-style hosts."""
        labels = host.split(".")
        if len(labels) < 3 or labels[0] in self.reserved_subdomains or not labels[0]:
            return None
        return labels[0]

    def path_signal(self, request: HTTPConnection) -> Optional[TenantSignal]:
        slug = request.path_params.get(TENANT_PATH_PARAM)
        if slug:
            return TenantSignal(TenantSignalSource.PATH, str(slug).lower())
        return None

    def header_signal(self, request: HTTPConnection) -> Optional[TenantSignal]:
        value = request.headers.get(self.header_name)
        if value and value.strip():
            return TenantSignal(TenantSignalSource.HEADER, value.strip().lower())
        return None

    async def resolve(
        self,
        request: HTTPConnection,
        allow_suspended: bool = False,
        fallback_key: Optional[str] = None,
    ) -> Tenant:
        """
        Resolve the tenant for a request.

        Args:
            request: Inbound request
            allow_suspended: Return suspended tenants too (status inquiry only)
            fallback_key: Slug or subdomain named in the request body; used
                only when host, path and header carry no signal

        Returns:
            The resolved tenant

        Raises:
            TenantNotFoundError: No signal, unknown or ambiguous key, or a
                suspended tenant when ``allow_suspended`` is False
        """
        tenant = await self.resolve_if_signalled(request, allow_suspended, fallback_key)
        if tenant is None:
            raise TenantNotFoundError(
                f"Tenant not identified. Use a tenant subdomain, the /t/<slug> path or the {self.header_name} header"
            )
        return tenant

    async def resolve_if_signalled(
        self,
        request: HTTPConnection,
        allow_suspended: bool = False,
        fallback_key: Optional[str] = None,
    ) -> Optional[Tenant]:
        """Same as ``resolve``, but None when the request names no tenant at all."""
        tenant, signal = await self._lookup(request)

        if signal is None and fallback_key and fallback_key.strip():
            signal = TenantSignal(TenantSignalSource.BODY, fallback_key.strip().lower())
            tenant = await self.store.find_tenant_by_slug_or_subdomain(signal.key)

        if signal is None:
            return None

        request.state.tenant_key = signal.key
        tenant = self._accept(tenant, signal.key, allow_suspended, source=signal.source.value)
        tenant.last_activity_at = utcnow()
        return tenant

    async def resolve_id(self, tenant_id: UUID, allow_suspended: bool = False) -> Tenant:
        """
        Resolve the tenant a verified token was issued for.

        Raises:
            TenantNotFoundError: Unknown tenant, or suspended when
                ``allow_suspended`` is False
        """
        tenant = await self.store.get_tenant(tenant_id)
        source = TenantSignalSource.TOKEN.value
        tenant = self._accept(tenant, str(tenant_id), allow_suspended, source=source)
        tenant.last_activity_at = utcnow()
        return tenant

    async def resolve_key(self, key: str, allow_suspended: bool = False) -> Tenant:
        """
        Resolve an explicit slug or subdomain, outside any request signal.

        Raises:
            TenantNotFoundError: Unknown or ambiguous key, or a suspended
                tenant when ``allow_suspended`` is False
        """
        key = key.strip().lower()
        tenant = await self.store.find_tenant_by_slug_or_subdomain(key)
        return self._accept(tenant, key, allow_suspended, source="explicit")

    @staticmethod
    def _accept(tenant: Optional[Tenant], key: str, allow_suspended: bool, source: str) -> Tenant:
        if tenant is None:
            logger.info("Tenant not found", extra={"tenant_key": key, "signal": source})
            raise TenantNotFoundError(f"Tenant '{key}' not found")

        if tenant.is_suspended and not allow_suspended:
            logger.info(
                "Suspended tenant refused",
                extra={"tenant_key": key, "tenant_id": str(tenant.id), "signal": source},
            )
            raise TenantNotFoundError(f"Tenant '{key}' not found")

        return tenant

    async def _lookup(
        self, request: HTTPConnection
    ) -> tuple[Optional[Tenant], Optional[TenantSignal]]:
        host = split_host(request.headers.get("host"))
        if host and "." in host:
            tenant = await self.store.find_tenant_by_custom_domain(host)
            if tenant is not None:
                return tenant, TenantSignal(TenantSignalSource.HOST, host)

            label = self.subdomain_label(host)
            if label is not None:
                signal = TenantSignal(TenantSignalSource.HOST, label)
                return await self.store.find_tenant_by_slug_or_subdomain(label), signal

        for signal in (self.path_signal(request), self.header_signal(request)):
            if signal is not None:
                return await self.store.find_tenant_by_slug_or_subdomain(signal.key), signal

        return None, None
