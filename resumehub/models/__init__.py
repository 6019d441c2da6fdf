"""
Database Models

Every tenant-owned table carries tenant_id. Queries filter on it explicitly.
"""
from resumehub.models.tenant import Tenant
from resumehub.models.user import User
from resumehub.models.resume import Resume
from resumehub.models.analysis_result import AnalysisResult

__all__ = ["Tenant", "User", "Resume", "AnalysisResult"]
