"""
Resume Endpoints

CRUD for resumes within a tenant, plus recording and reading analyses.

Authorization goes through the AccessGuard on app.state (ResumePolicy):
- List own resumes / upload: any authenticated user
- View, update, delete, restore, force delete, analysis: owner only

Lookups are always filtered by tenant first, so a resume of another tenant
is a 404 and never reaches the policy.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from resumehub.api.deps import get_access_guard, get_analysis_service, get_current_tenant, get_current_user
from resumehub.core.exceptions import ResumeNotFoundError
from resumehub.core.policies import AccessGuard, Action, authorize
from resumehub.database import get_db
from resumehub.models.resume import Resume
from resumehub.models.tenant import Tenant
from resumehub.models.user import User
from resumehub.schemas.analysis import AnalysisResultCreate, AnalysisResultResponse
from resumehub.schemas.resume import ResumeCreate, ResumeListResponse, ResumeResponse, ResumeUpdate
from resumehub.services.analysis import AnalysisService
from resumehub.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/resumes", tags=["resumes"])


def _get_resume(db: Session, tenant: Tenant, resume_id: str, deleted: Optional[bool] = False) -> Resume:
    """
    Load a resume of the current tenant.

    deleted=False only finds live resumes, deleted=True only soft-deleted
    ones, deleted=None finds either.
    """
    resume = db.query(Resume).filter(
        Resume.id == resume_id,
        Resume.tenant_id == tenant.id
    ).first()

    if not resume or (deleted is not None and resume.is_deleted != deleted):
        raise ResumeNotFoundError(resume_id)
    return resume


@router.get("", response_model=ResumeListResponse)
async def list_resumes(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    analysis_status: Optional[str] = Query(None, pattern="^(pending|processing|completed|failed)$"),
    include_deleted: bool = False,
    current_user: User = Depends(get_current_user),
    tenant: Tenant = Depends(get_current_tenant),
    guard: AccessGuard = Depends(get_access_guard),
    db: Session = Depends(get_db)
):
    """List the current user's resumes, newest first."""
    authorize(guard, Action.VIEW_ANY, current_user)

    query = db.query(Resume).filter(
        Resume.tenant_id == tenant.id,
        Resume.user_id == current_user.id
    )

    if not include_deleted:
        query = query.filter(Resume.deleted_at.is_(None))

    if analysis_status:
        query = query.filter(Resume.analysis_status == analysis_status)

    total = query.count()

    offset = (page - 1) * page_size
    resumes = query.order_by(
        Resume.created_at.desc()
    ).offset(offset).limit(page_size).all()

    return ResumeListResponse(
        resumes=resumes,
        total=total,
        page=page,
        page_size=page_size
    )


@router.post("", response_model=ResumeResponse, status_code=status.HTTP_201_CREATED)
async def create_resume(
    resume_data: ResumeCreate,
    current_user: User = Depends(get_current_user),
    tenant: Tenant = Depends(get_current_tenant),
    guard: AccessGuard = Depends(get_access_guard),
    db: Session = Depends(get_db)
):
    """Register an uploaded resume. The uploader becomes its owner."""
    authorize(guard, Action.CREATE, current_user)

    resume = Resume(
        tenant_id=tenant.id,
        user_id=current_user.id,
        filename=resume_data.filename,
        original_filename=resume_data.original_filename,
        file_size=resume_data.file_size,
        file_type=resume_data.file_type,
        storage_path=resume_data.storage_path,
        resume_metadata=resume_data.resume_metadata or {}
    )

    db.add(resume)
    db.commit()
    db.refresh(resume)

    logger.info(
        f"Resume created: {resume.id} by user {current_user.id}",
        extra={"tenant_id": tenant.id, "resume_id": resume.id}
    )

    return resume


@router.get("/{resume_id}", response_model=ResumeResponse)
async def get_resume(
    resume_id: str,
    current_user: User = Depends(get_current_user),
    tenant: Tenant = Depends(get_current_tenant),
    guard: AccessGuard = Depends(get_access_guard),
    db: Session = Depends(get_db)
):
    resume = _get_resume(db, tenant, resume_id)
    authorize(guard, Action.VIEW, current_user, resume)
    return resume


@router.patch("/{resume_id}", response_model=ResumeResponse)
async def update_resume(
    resume_id: str,
    resume_update: ResumeUpdate,
    current_user: User = Depends(get_current_user),
    tenant: Tenant = Depends(get_current_tenant),
    guard: AccessGuard = Depends(get_access_guard),
    db: Session = Depends(get_db)
):
    """Update resume details. Each accepted update bumps the version."""
    resume = _get_resume(db, tenant, resume_id)
    authorize(guard, Action.UPDATE, current_user, resume)

    update_data = resume_update.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(resume, field, value)

    resume.version += 1

    db.commit()
    db.refresh(resume)

    logger.info(
        f"Resume updated: {resume.id} (version {resume.version})",
        extra={"tenant_id": tenant.id, "resume_id": resume.id}
    )

    return resume


@router.delete("/{resume_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_resume(
    resume_id: str,
    force: bool = False,
    current_user: User = Depends(get_current_user),
    tenant: Tenant = Depends(get_current_tenant),
    guard: AccessGuard = Depends(get_access_guard),
    db: Session = Depends(get_db)
):
    """
    Delete a resume.

    By default the resume is soft-deleted and can be restored. With
    ?force=true it is removed for good together with its analyses; a
    soft-deleted resume can also be force-deleted.
    """
    if force:
        resume = _get_resume(db, tenant, resume_id, deleted=None)
        authorize(guard, Action.FORCE_DELETE, current_user, resume)
        db.delete(resume)
        logger.warning(
            f"Resume permanently deleted: {resume_id} by user {current_user.id}",
            extra={"tenant_id": tenant.id, "resume_id": resume_id}
        )
    else:
        resume = _get_resume(db, tenant, resume_id)
        authorize(guard, Action.DELETE, current_user, resume)
        resume.soft_delete()
        logger.info(
            f"Resume deleted: {resume_id} by user {current_user.id}",
            extra={"tenant_id": tenant.id, "resume_id": resume_id}
        )

    db.commit()

    return None


@router.post("/{resume_id}/restore", response_model=ResumeResponse)
async def restore_resume(
    resume_id: str,
    current_user: User = Depends(get_current_user),
    tenant: Tenant = Depends(get_current_tenant),
    guard: AccessGuard = Depends(get_access_guard),
    db: Session = Depends(get_db)
):
    """Bring back a soft-deleted resume."""
    resume = _get_resume(db, tenant, resume_id, deleted=True)
    authorize(guard, Action.RESTORE, current_user, resume)

    resume.restore()
    db.commit()
    db.refresh(resume)

    logger.info(
        f"Resume restored: {resume_id} by user {current_user.id}",
        extra={"tenant_id": tenant.id, "resume_id": resume_id}
    )

    return resume


@router.post(
    "/{resume_id}/analysis",
    response_model=AnalysisResultResponse,
    status_code=status.HTTP_201_CREATED
)
async def record_analysis(
    resume_id: str,
    result: AnalysisResultCreate,
    current_user: User = Depends(get_current_user),
    tenant: Tenant = Depends(get_current_tenant),
    guard: AccessGuard = Depends(get_access_guard),
    analysis_service: AnalysisService = Depends(get_analysis_service),
    db: Session = Depends(get_db)
):
    """
    Record a finished analysis for a resume.

    The owner is notified asynchronously; the response does not wait for it.
    """
    resume = _get_resume(db, tenant, resume_id)
    authorize(guard, Action.UPDATE, current_user, resume)

    return analysis_service.complete(db, resume, result.model_dump())


@router.get("/{resume_id}/analysis", response_model=AnalysisResultResponse)
async def get_latest_analysis(
    resume_id: str,
    current_user: User = Depends(get_current_user),
    tenant: Tenant = Depends(get_current_tenant),
    guard: AccessGuard = Depends(get_access_guard),
    analysis_service: AnalysisService = Depends(get_analysis_service),
    db: Session = Depends(get_db)
):
    resume = _get_resume(db, tenant, resume_id)
    authorize(guard, Action.VIEW, current_user, resume)

    analysis = analysis_service.latest(db, resume)
    if not analysis:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No analysis recorded for this resume"
        )
    return analysis
