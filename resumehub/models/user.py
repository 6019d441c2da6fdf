"""
User Model

Users belong to exactly one tenant. The user id is the identity the resume
policy compares against Resume.user_id.
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Index, Integer
from sqlalchemy.orm import relationship
from datetime import datetime, timedelta
from resumehub.database import Base
import uuid


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    tenant_id = Column(
        String(36),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    email = Column(String(255), nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(255), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)

    # Login tracking and lockout
    login_attempts = Column(Integer, default=0, nullable=False)
    locked_until = Column(DateTime, nullable=True, index=True)
    last_login_at = Column(DateTime, nullable=True, index=True)
    last_login_ip = Column(String(45), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    tenant = relationship("Tenant", back_populates="users")
    resumes = relationship("Resume", back_populates="user")

    __table_args__ = (
        # Same email may exist in different tenants
        Index('idx_user_tenant_email', 'tenant_id', 'email', unique=True),
    )

    def __repr__(self):
        return f"<User {self.email} (tenant={self.tenant_id})>"

    def is_locked(self, now: datetime = None) -> bool:
        if self.locked_until is None:
            return False
        return self.locked_until > (now or datetime.utcnow())

    def record_login(self, ip_address: str = None) -> None:
        self.login_attempts = 0
        self.locked_until = None
        self.last_login_at = datetime.utcnow()
        self.last_login_ip = ip_address

    def record_failed_login(self, max_attempts: int, lockout_minutes: int) -> bool:
        """
        Count a failed attempt and lock the account once the limit is hit.

        Returns True when this attempt locked the account. An expired lock
        starts a fresh count.
        """
        now = datetime.utcnow()
        if self.locked_until is not None and self.locked_until <= now:
            self.login_attempts = 0
            self.locked_until = None

        self.login_attempts = (self.login_attempts or 0) + 1
        if self.login_attempts >= max_attempts:
            self.locked_until = now + timedelta(minutes=lockout_minutes)
            return True
        return False
