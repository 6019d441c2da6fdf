"""
API Dependencies

Authentication and service injection for the endpoints.

Services are built once in create_app() and kept on app.state; the get_*
dependencies below hand them to endpoints, so nothing looks up a global.
"""
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from resumehub.config import Settings
from resumehub.core.exceptions import AuthenticationError, TenantIsolationError
from resumehub.core.policies import AccessGuard
from resumehub.core.security import decode_access_token
from resumehub.database import get_db
from resumehub.events import EventBus
from resumehub.models.tenant import Tenant
from resumehub.models.user import User
from resumehub.services.analysis import AnalysisService
from resumehub.services.dashboard import DashboardService
from resumehub.utils.logging import get_logger, log_security_event

logger = get_logger(__name__)

security = HTTPBearer()


def get_current_tenant(request: Request) -> Tenant:
    """
    Tenant selected by TenantMiddleware.

    Missing state means the middleware did not run for a tenant route.
    """
    tenant = getattr(request.state, "tenant", None)
    if not tenant:
        logger.error("No tenant in request state - middleware may have failed")
        raise TenantIsolationError("Tenant context not available")
    return tenant


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant)
) -> User:
    """
    Authenticated user of the current tenant.

    The token must have been issued for the tenant the request was routed
    to, and the user must exist and be active in that tenant.
    """
    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise AuthenticationError("Invalid or expired token")

    user_id = payload.get("sub")
    token_tenant_id = payload.get("tenant_id")

    if not user_id:
        raise AuthenticationError("Invalid token payload")

    if token_tenant_id != tenant.id:
        log_security_event(
            "tenant_isolation_violation",
            {"user_id": user_id, "token_tenant": token_tenant_id, "tenant_id": tenant.id},
            logger
        )
        raise TenantIsolationError("Token tenant mismatch")

    user = db.query(User).filter(
        User.id == user_id,
        User.tenant_id == tenant.id
    ).first()

    if not user:
        logger.warning(f"User not found: {user_id} in tenant {tenant.id}")
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise AuthenticationError("User account is inactive")

    return user


def get_access_guard(request: Request) -> AccessGuard:
    return request.app.state.access_guard


def get_event_bus(request: Request) -> EventBus:
    return request.app.state.event_bus


def get_analysis_service(request: Request) -> AnalysisService:
    return request.app.state.analysis_service


def get_dashboard_service(request: Request) -> DashboardService:
    return request.app.state.dashboard_service


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
