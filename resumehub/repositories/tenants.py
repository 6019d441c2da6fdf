"""
SQLAlchemy tenant lookups used by the tenant finder.

Database errors become InfrastructureError so callers can tell an outage
apart from a tenant that does not exist.
"""
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from resumehub.core.exceptions import InfrastructureError
from resumehub.models.tenant import Tenant
from resumehub.utils.logging import get_logger

logger = get_logger(__name__)


class SqlAlchemyTenantLookup:

    def __init__(self, db: Session):
        self.db = db

    def find_by_subdomain(self, subdomain: str) -> Optional[Tenant]:
        return self._first(Tenant.subdomain == subdomain)

    def find_by_domain(self, domain: str) -> Optional[Tenant]:
        return self._first(Tenant.domain == domain)

    def find_by_id(self, tenant_id: str) -> Optional[Tenant]:
        return self._first(Tenant.id == tenant_id)

    def _first(self, criterion) -> Optional[Tenant]:
        try:
            return self.db.query(Tenant).filter(criterion).first()
        except SQLAlchemyError as exc:
            logger.error(f"Tenant lookup failed: {exc}")
            raise InfrastructureError("Tenant lookup failed") from exc
