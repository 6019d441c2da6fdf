"""
Dashboard Endpoints

Statistics over the current user's own resumes.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from resumehub.api.deps import get_current_user, get_dashboard_service
from resumehub.database import get_db
from resumehub.models.user import User
from resumehub.schemas.dashboard import DashboardResponse
from resumehub.services.dashboard import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    time_range: int = Query(30, ge=1, le=365, description="Days counted as recent"),
    recent_limit: int = Query(5, ge=1, le=50),
    current_user: User = Depends(get_current_user),
    dashboard_service: DashboardService = Depends(get_dashboard_service),
    db: Session = Depends(get_db)
):
    return dashboard_service.get_dashboard_data(
        db,
        current_user,
        time_range=time_range,
        recent_limit=recent_limit
    )
