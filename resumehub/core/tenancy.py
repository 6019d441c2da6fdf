"""
Tenant Resolution

Decides which tenant a request belongs to, and tracks that tenant as the
"current" one for the rest of the request.

ROUTING ORDER (first match wins):
1. Subdomain: acme.resumehub.io -> tenant with subdomain "acme" ("www" is
   never a tenant subdomain)
2. Custom domain: careers.acme.com -> tenant with that exact domain
3. ?tenant=<id> query parameter, for environments without real DNS (local
   development). It is only consulted when no host matched, and can be
   switched off with TENANT_QUERY_PARAM_ENABLED.

The finder depends on a TenantLookup, not on the database, so the routing
rules can be exercised without one.
"""
from contextvars import ContextVar, Token
from typing import Mapping, Optional, Protocol
import logging

from resumehub.models.tenant import Tenant

logger = logging.getLogger(__name__)

TENANT_QUERY_PARAM = "tenant"
NON_TENANT_SUBDOMAIN = "www"


class TenantLookup(Protocol):
    """
    Storage-side tenant finders.

    Each returns None when nothing matches and raises InfrastructureError
    when the backing store fails.
    """

    def find_by_subdomain(self, subdomain: str) -> Optional[Tenant]:
        ...

    def find_by_domain(self, domain: str) -> Optional[Tenant]:
        ...

    def find_by_id(self, tenant_id: str) -> Optional[Tenant]:
        ...


class TenantFinder(Protocol):
    """Picks the tenant for a request."""

    def resolve(self, host: str, query_params: Mapping[str, str]) -> Optional[Tenant]:
        ...


class DomainTenantFinder:
    """
    Subdomain, then custom domain, then (optionally) ?tenant=<id>.

    Lookup failures are not caught here: a database outage must surface as
    an error, never as "tenant not found".
    """

    def __init__(self, lookup: TenantLookup, allow_query_param: bool = True):
        self.lookup = lookup
        self.allow_query_param = allow_query_param

    def resolve(self, host: str, query_params: Mapping[str, str]) -> Optional[Tenant]:
        host = host or ""

        if "." in host:
            subdomain = host.split(".", 1)[0]
            if subdomain != NON_TENANT_SUBDOMAIN:
                tenant = self.lookup.find_by_subdomain(subdomain)
                if tenant:
                    logger.debug(f"Tenant resolved by subdomain: {subdomain}")
                    return tenant

        tenant = self.lookup.find_by_domain(host)
        if tenant:
            logger.debug(f"Tenant resolved by domain: {host}")
            return tenant

        if TENANT_QUERY_PARAM in query_params:
            if not self.allow_query_param:
                logger.warning(f"Ignoring ?{TENANT_QUERY_PARAM}= for host {host}: query fallback disabled")
                return None
            tenant_id = query_params.get(TENANT_QUERY_PARAM)
            if not tenant_id:
                return None
            logger.debug(f"Tenant resolved by query parameter: {tenant_id}")
            return self.lookup.find_by_id(tenant_id)

        return None


# ============================================================================
# CURRENT TENANT
# ============================================================================

_current_tenant: ContextVar[Optional[Tenant]] = ContextVar("current_tenant", default=None)


def make_current(tenant: Tenant) -> Token:
    """Make tenant current for this context. Pass the token to forget_current()."""
    return _current_tenant.set(tenant)


def forget_current(token: Token) -> None:
    _current_tenant.reset(token)


def get_current_tenant() -> Optional[Tenant]:
    return _current_tenant.get()


def tenant_cache_prefix(base_prefix: str, tenant: Optional[Tenant] = None) -> str:
    """
    Cache key prefix for a tenant, e.g. "resumehub_tenant_42".

    Defaults to the current tenant. Without one, the base prefix is returned
    unchanged.
    """
    if tenant is None:
        tenant = get_current_tenant()
    if tenant is None:
        return base_prefix
    return f"{base_prefix}_tenant_{tenant.id}"
