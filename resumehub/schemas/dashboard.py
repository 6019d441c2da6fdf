"""
Dashboard Schemas
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class DashboardStats(BaseModel):
    total_resumes: int
    analyzed_resumes: int
    processing_resumes: int
    failed_analyses: int
    recent_uploads: int
    average_score: Optional[float]
    best_score: Optional[int]
    improvement_trend: int


class LatestAnalysis(BaseModel):
    id: str
    overall_score: int
    overall_grade: str
    ats_score: Optional[int]
    created_at: datetime


class RecentResume(BaseModel):
    id: str
    original_filename: str
    analysis_status: str
    parsing_status: str
    file_type: Optional[str]
    file_size_human: str
    created_at: datetime
    latest_analysis: Optional[LatestAnalysis]


class DashboardResponse(BaseModel):
    stats: DashboardStats
    recent_resumes: list[RecentResume]
