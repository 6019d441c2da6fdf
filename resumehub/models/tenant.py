"""
Tenant Model

The tenant is the isolation boundary of the platform. A request is routed to
a tenant by subdomain (acme.resumehub.io) or by a tenant-configured custom
domain (careers.acme.com).

Both routing columns are unique and nullable: a tenant may use either scheme,
both, or neither (reachable only through the development ?tenant= fallback).
"""
from sqlalchemy import Column, String, Boolean, DateTime, JSON, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from resumehub.database import Base
import uuid


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    name = Column(String(255), nullable=False)

    # Routing keys, at most one tenant per value
    subdomain = Column(String(63), unique=True, nullable=True, index=True)
    domain = Column(String(255), unique=True, nullable=True, index=True)

    plan = Column(String(20), default="starter", nullable=False)  # starter, professional, enterprise
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    # Free-form settings (branding, custom features)
    data = Column(JSON, nullable=True, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    users = relationship("User", back_populates="tenant", cascade="all, delete-orphan")
    resumes = relationship("Resume", back_populates="tenant", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_tenant_domain_subdomain', 'domain', 'subdomain'),
    )

    def __repr__(self):
        return f"<Tenant {self.subdomain or self.domain or self.id}>"
