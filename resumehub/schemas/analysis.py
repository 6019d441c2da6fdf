"""
Analysis Schemas

Results arrive from the external analyzer; scores are 0-100.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class AnalysisResultCreate(BaseModel):
    analysis_type: str = Field("full", min_length=1, max_length=50)
    overall_score: int = Field(..., ge=0, le=100)
    ats_score: Optional[int] = Field(None, ge=0, le=100)
    content_score: Optional[int] = Field(None, ge=0, le=100)
    format_score: Optional[int] = Field(None, ge=0, le=100)
    keyword_score: Optional[int] = Field(None, ge=0, le=100)
    recommendations: list[str] = Field(default_factory=list)
    extracted_skills: list[str] = Field(default_factory=list)
    missing_skills: list[str] = Field(default_factory=list)


class AnalysisResultResponse(AnalysisResultCreate):
    id: str
    resume_id: str
    overall_grade: str
    created_at: datetime

    class Config:
        from_attributes = True
