"""
Authentication Endpoints

Registration and login inside the tenant the request was routed to.

Every login attempt raises an event (LoginSucceeded, LoginFailed, Lockout);
the security log is written by the listeners, not here.
"""
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from resumehub.api.deps import get_app_settings, get_current_tenant, get_current_user, get_event_bus
from resumehub.config import Settings
from resumehub.core.exceptions import AccountLockedError, AuthenticationError
from resumehub.core.security import create_access_token, get_password_hash, verify_password
from resumehub.database import get_db
from resumehub.events import EventBus, LoginFailed, LoginSucceeded, Lockout
from resumehub.models.tenant import Tenant
from resumehub.models.user import User
from resumehub.schemas.auth import LoginRequest, RegisterRequest, Token
from resumehub.schemas.user import UserResponse
from resumehub.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


def _client(request: Request):
    ip_address = request.client.host if request.client else None
    return ip_address, request.headers.get("user-agent")


@router.post("/login", response_model=Token)
async def login(
    credentials: LoginRequest,
    request: Request,
    tenant: Tenant = Depends(get_current_tenant),
    db: Session = Depends(get_db),
    event_bus: EventBus = Depends(get_event_bus),
    settings: Settings = Depends(get_app_settings)
):
    """
    Authenticate a user of the current tenant and return a JWT.

    Process:
    1. Find the user in this tenant by email
    2. Refuse while the account is locked
    3. Verify password; a failure counts towards the lockout
    4. Reset the counters and issue a token bound to the tenant

    Unknown email and wrong password give the same 401.
    """
    ip_address, user_agent = _client(request)

    user = db.query(User).filter(
        User.tenant_id == tenant.id,
        User.email == credentials.email
    ).first()

    if not user:
        event_bus.dispatch(LoginFailed(
            tenant_id=tenant.id,
            email=credentials.email,
            ip_address=ip_address,
            user_agent=user_agent
        ))
        raise AuthenticationError("Invalid credentials")

    if user.is_locked():
        event_bus.dispatch(Lockout(
            tenant_id=tenant.id,
            email=user.email,
            user_id=user.id,
            locked_until=user.locked_until,
            ip_address=ip_address,
            user_agent=user_agent
        ))
        retry_after = max(1, int((user.locked_until - datetime.utcnow()).total_seconds()))
        raise AccountLockedError(retry_after)

    if not verify_password(credentials.password, user.hashed_password):
        locked = user.record_failed_login(settings.LOGIN_MAX_ATTEMPTS, settings.LOGIN_LOCKOUT_MINUTES)
        db.commit()

        event_bus.dispatch(LoginFailed(
            tenant_id=tenant.id,
            email=user.email,
            user_id=user.id,
            login_attempts=user.login_attempts,
            is_locked=locked,
            ip_address=ip_address,
            user_agent=user_agent
        ))
        if locked:
            event_bus.dispatch(Lockout(
                tenant_id=tenant.id,
                email=user.email,
                user_id=user.id,
                locked_until=user.locked_until,
                ip_address=ip_address,
                user_agent=user_agent
            ))
        raise AuthenticationError("Invalid credentials")

    if not user.is_active:
        raise AuthenticationError("User account is inactive")

    user.record_login(ip_address)
    db.commit()

    event_bus.dispatch(LoginSucceeded(
        user_id=user.id,
        tenant_id=tenant.id,
        email=user.email,
        ip_address=ip_address,
        user_agent=user_agent
    ))

    access_token = create_access_token(user.id, tenant.id, extra_claims={"email": user.email})
    return Token(access_token=access_token, token_type="bearer")


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    registration: RegisterRequest,
    tenant: Tenant = Depends(get_current_tenant),
    db: Session = Depends(get_db)
):
    """
    Register a new user in the current tenant.

    The same email may be registered once per tenant.
    """
    existing_user = db.query(User).filter(
        User.tenant_id == tenant.id,
        User.email == registration.email
    ).first()

    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User with this email already exists in this tenant"
        )

    new_user = User(
        tenant_id=tenant.id,
        email=registration.email,
        hashed_password=get_password_hash(registration.password),
        name=registration.name,
        is_active=True
    )

    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    logger.info(f"New user registered: {new_user.id} in tenant {tenant.id}")

    return new_user


@router.get("/me", response_model=UserResponse)
async def read_current_user(current_user: User = Depends(get_current_user)):
    return current_user
