"""
Tests for tenant routing and the current-tenant context.
"""
import pytest

from resumehub.core.exceptions import InfrastructureError
from resumehub.core.tenancy import (
    DomainTenantFinder,
    forget_current,
    get_current_tenant,
    make_current,
    tenant_cache_prefix,
)
from resumehub.models.tenant import Tenant


class FakeLookup:
    """In-memory TenantLookup that records every call."""

    def __init__(self, tenants=(), fail=False):
        self.tenants = list(tenants)
        self.fail = fail
        self.calls = []

    def _find(self, kind, attr, value):
        self.calls.append((kind, value))
        if self.fail:
            raise InfrastructureError("database unavailable")
        for tenant in self.tenants:
            if getattr(tenant, attr) == value:
                return tenant
        return None

    def find_by_subdomain(self, subdomain):
        return self._find("subdomain", "subdomain", subdomain)

    def find_by_domain(self, domain):
        return self._find("domain", "domain", domain)

    def find_by_id(self, tenant_id):
        return self._find("id", "id", tenant_id)


@pytest.fixture
def acme():
    return Tenant(id="t-acme", name="Acme", subdomain="acme", is_active=True)


@pytest.fixture
def globex():
    return Tenant(id="t-globex", name="Globex", domain="careers.globex.example", is_active=True)


@pytest.fixture
def lookup(acme, globex):
    return FakeLookup([acme, globex])


def test_subdomain_wins(lookup, acme):
    finder = DomainTenantFinder(lookup)
    assert finder.resolve("acme.resumehub.example", {}) is acme
    assert lookup.calls == [("subdomain", "acme")]


def test_falls_back_to_custom_domain(lookup, globex):
    finder = DomainTenantFinder(lookup)
    assert finder.resolve("careers.globex.example", {}) is globex
    assert lookup.calls == [("subdomain", "careers"), ("domain", "careers.globex.example")]


def test_subdomain_match_beats_domain_match():
    by_subdomain = Tenant(id="a", name="A", subdomain="shop")
    by_domain = Tenant(id="b", name="B", domain="shop.example.com")
    finder = DomainTenantFinder(FakeLookup([by_subdomain, by_domain]))
    assert finder.resolve("shop.example.com", {}) is by_subdomain


def test_www_is_never_a_subdomain():
    www = Tenant(id="w", name="WWW", subdomain="www")
    lookup = FakeLookup([www])
    finder = DomainTenantFinder(lookup)
    assert finder.resolve("www.resumehub.example", {}) is None
    assert ("subdomain", "www") not in lookup.calls


def test_host_without_dot_skips_subdomain(lookup):
    finder = DomainTenantFinder(lookup)
    assert finder.resolve("localhost", {}) is None
    assert lookup.calls == [("domain", "localhost")]


def test_query_param_used_when_host_does_not_match(lookup, acme):
    finder = DomainTenantFinder(lookup)
    assert finder.resolve("www.resumehub.example", {"tenant": "t-acme"}) is acme
    assert lookup.calls[-1] == ("id", "t-acme")


def test_query_param_ignored_when_host_matches(lookup, acme, globex):
    finder = DomainTenantFinder(lookup)
    assert finder.resolve("acme.resumehub.example", {"tenant": globex.id}) is acme
    assert ("id", globex.id) not in lookup.calls


def test_empty_query_param_resolves_nothing(lookup):
    finder = DomainTenantFinder(lookup)
    assert finder.resolve("localhost", {"tenant": ""}) is None
    assert all(kind != "id" for kind, _ in lookup.calls)


def test_query_param_disabled(lookup):
    finder = DomainTenantFinder(lookup, allow_query_param=False)
    assert finder.resolve("localhost", {"tenant": "t-acme"}) is None
    assert all(kind != "id" for kind, _ in lookup.calls)


def test_unknown_everything_is_none(lookup):
    finder = DomainTenantFinder(lookup)
    assert finder.resolve("nobody.resumehub.example", {"tenant": "missing"}) is None


def test_lookup_failure_is_not_reported_as_missing_tenant():
    finder = DomainTenantFinder(FakeLookup(fail=True))
    with pytest.raises(InfrastructureError):
        finder.resolve("acme.resumehub.example", {})


def test_resolution_is_repeatable(lookup, acme):
    finder = DomainTenantFinder(lookup)
    first = finder.resolve("acme.resumehub.example", {})
    second = finder.resolve("acme.resumehub.example", {})
    assert first is second is acme


def test_current_tenant_is_scoped(acme):
    assert get_current_tenant() is None
    token = make_current(acme)
    try:
        assert get_current_tenant() is acme
    finally:
        forget_current(token)
    assert get_current_tenant() is None


def test_cache_prefix(acme):
    assert tenant_cache_prefix("resumehub", acme) == "resumehub_tenant_t-acme"
    assert tenant_cache_prefix("resumehub") == "resumehub"

    token = make_current(acme)
    try:
        assert tenant_cache_prefix("resumehub") == "resumehub_tenant_t-acme"
    finally:
        forget_current(token)
