"""
Resume Schemas

The owner is never part of a request body: it is the authenticated user on
create and cannot be changed afterwards.
"""
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime


class ResumeCreate(BaseModel):
    filename: str = Field(..., min_length=1, max_length=255)
    original_filename: str = Field(..., min_length=1, max_length=255)
    file_size: Optional[int] = Field(None, ge=0)
    file_type: Optional[str] = Field(None, max_length=100)
    storage_path: Optional[str] = Field(None, max_length=512)
    resume_metadata: Optional[Dict[str, Any]] = None


class ResumeUpdate(BaseModel):
    """All fields optional."""
    original_filename: Optional[str] = Field(None, min_length=1, max_length=255)
    is_active: Optional[bool] = None
    parsing_status: Optional[str] = Field(None, pattern="^(pending|processing|completed|failed)$")
    analysis_status: Optional[str] = Field(None, pattern="^(pending|processing|completed|failed)$")
    resume_metadata: Optional[Dict[str, Any]] = None


class ResumeResponse(BaseModel):
    id: str
    tenant_id: str
    user_id: str
    filename: str
    original_filename: str
    file_size: Optional[int]
    file_size_human: str
    file_type: Optional[str]
    parsing_status: str
    analysis_status: str
    version: int
    is_active: bool
    resume_metadata: Optional[Dict[str, Any]]
    deleted_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ResumeListResponse(BaseModel):
    """Paginated list of resumes."""
    resumes: list[ResumeResponse]
    total: int
    page: int
    page_size: int
