"""
Login lifecycle events.

Plain snapshots of the attempt, so listeners never touch the request or an
ORM session.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class LoginSucceeded:
    user_id: str
    tenant_id: str
    email: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    occurred_at: datetime = field(default_factory=datetime.utcnow)


@dataclass(frozen=True)
class LoginFailed:
    """user_id is None when the email is unknown in the tenant."""
    tenant_id: str
    email: str
    user_id: Optional[str] = None
    login_attempts: int = 0
    is_locked: bool = False
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    occurred_at: datetime = field(default_factory=datetime.utcnow)


@dataclass(frozen=True)
class Lockout:
    tenant_id: str
    email: str
    user_id: Optional[str] = None
    locked_until: Optional[datetime] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    occurred_at: datetime = field(default_factory=datetime.utcnow)
