"""
Tenant Middleware

Resolves the tenant for every request and makes it available as
request.state.tenant and as the current tenant (core.tenancy) while the
request is handled.

Routing rules live in DomainTenantFinder; this class only binds them to
HTTP: host without port, query string, and the responses for the three
failure cases (no tenant, inactive tenant, lookup failure).
"""
from typing import Callable, Optional

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
import logging

from resumehub.core.exceptions import InfrastructureError, TenantNotFoundError
from resumehub.core.tenancy import DomainTenantFinder, forget_current, make_current
from resumehub.database import SessionLocal
from resumehub.models.tenant import Tenant
from resumehub.repositories.tenants import SqlAlchemyTenantLookup

logger = logging.getLogger(__name__)

EXCLUDED_PATHS = (
    "/docs",
    "/redoc",
    "/openapi.json",
    "/health",
)


class TenantMiddleware(BaseHTTPMiddleware):
    """
    Runs on every request except EXCLUDED_PATHS and the API root.

    Lookups are blocking database calls, so they run on the threadpool.
    """

    def __init__(self, app, session_factory: Optional[Callable] = None, allow_query_param: bool = True):
        super().__init__(app)
        self.session_factory = session_factory or SessionLocal
        self.allow_query_param = allow_query_param

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if path == "/" or any(path.startswith(excluded) for excluded in EXCLUDED_PATHS):
            return await call_next(request)

        host = request.url.hostname or ""

        try:
            tenant = await run_in_threadpool(self._resolve, host, request.query_params)
        except InfrastructureError as exc:
            logger.error(f"Tenant resolution failed for host {host}: {exc}")
            return JSONResponse(
                status_code=503,
                content={"detail": "Tenant resolution temporarily unavailable", "type": "infrastructure_error"}
            )

        if tenant is None:
            logger.warning(f"No tenant for host {host}")
            exc = TenantNotFoundError(host)
            return JSONResponse(
                status_code=exc.status_code,
                content={"detail": exc.detail, "type": "tenant_not_found"}
            )

        if not tenant.is_active:
            logger.warning(f"Inactive tenant attempted access: {tenant.id}")
            return JSONResponse(
                status_code=403,
                content={"detail": "Tenant account is inactive", "type": "tenant_inactive"}
            )

        request.state.tenant = tenant
        request.state.tenant_id = tenant.id

        logger.debug(f"Request for tenant {tenant.id} via {host}")

        token = make_current(tenant)
        try:
            return await call_next(request)
        finally:
            forget_current(token)

    def _resolve(self, host: str, query_params) -> Optional[Tenant]:
        db = self.session_factory()
        try:
            finder = DomainTenantFinder(SqlAlchemyTenantLookup(db), allow_query_param=self.allow_query_param)
            return finder.resolve(host, query_params)
        finally:
            db.close()
