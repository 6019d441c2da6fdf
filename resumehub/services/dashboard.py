"""
Dashboard Service

Per-user resume statistics for the dashboard. Stateless: one instance is
built at startup and shared by all requests; the session is passed in.
"""
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from resumehub.models.analysis_result import AnalysisResult
from resumehub.models.resume import Resume
from resumehub.models.user import User


class DashboardService:

    def get_dashboard_data(
        self,
        db: Session,
        user: User,
        time_range: int = 30,
        recent_limit: int = 5
    ) -> Dict[str, Any]:
        return {
            "stats": self.get_stats(db, user, time_range),
            "recent_resumes": self.get_recent_resumes(db, user, recent_limit),
        }

    def get_stats(self, db: Session, user: User, time_range: int = 30) -> Dict[str, Any]:
        start_date = datetime.utcnow() - timedelta(days=time_range)
        resumes = self._own_resumes(db, user)

        scores = (
            db.query(AnalysisResult.overall_score)
            .join(Resume, AnalysisResult.resume_id == Resume.id)
            .filter(
                Resume.tenant_id == user.tenant_id,
                Resume.user_id == user.id,
                Resume.deleted_at.is_(None),
            )
        )
        average_score, best_score = scores.with_entities(
            func.avg(AnalysisResult.overall_score),
            func.max(AnalysisResult.overall_score),
        ).one()

        return {
            "total_resumes": resumes.count(),
            "analyzed_resumes": resumes.filter(Resume.analysis_status == "completed").count(),
            "processing_resumes": resumes.filter(Resume.analysis_status == "processing").count(),
            "failed_analyses": resumes.filter(Resume.analysis_status == "failed").count(),
            "recent_uploads": resumes.filter(Resume.created_at >= start_date).count(),
            "average_score": round(float(average_score), 1) if average_score is not None else None,
            "best_score": best_score,
            "improvement_trend": self.get_improvement_trend(db, user, time_range),
        }

    def get_improvement_trend(self, db: Session, user: User, time_range: int = 30) -> int:
        """Latest score minus earliest score within the window; 0 with fewer than two analyses."""
        start_date = datetime.utcnow() - timedelta(days=time_range)
        scores = [
            score for (score,) in (
                db.query(AnalysisResult.overall_score)
                .join(Resume, AnalysisResult.resume_id == Resume.id)
                .filter(
                    Resume.tenant_id == user.tenant_id,
                    Resume.user_id == user.id,
                    Resume.deleted_at.is_(None),
                    AnalysisResult.created_at >= start_date,
                )
                .order_by(AnalysisResult.created_at.asc())
                .all()
            )
        ]
        if len(scores) < 2:
            return 0
        return scores[-1] - scores[0]

    def get_recent_resumes(self, db: Session, user: User, limit: int = 5) -> List[Dict[str, Any]]:
        resumes = (
            self._own_resumes(db, user)
            .order_by(Resume.created_at.desc())
            .limit(limit)
            .all()
        )
        return [
            {
                "id": resume.id,
                "original_filename": resume.original_filename,
                "analysis_status": resume.analysis_status,
                "parsing_status": resume.parsing_status,
                "file_type": resume.file_type,
                "file_size_human": resume.file_size_human,
                "created_at": resume.created_at,
                "latest_analysis": self._latest_analysis(resume),
            }
            for resume in resumes
        ]

    @staticmethod
    def _latest_analysis(resume: Resume) -> Optional[Dict[str, Any]]:
        if not resume.analysis_results:
            return None
        latest = resume.analysis_results[-1]
        return {
            "id": latest.id,
            "overall_score": latest.overall_score,
            "overall_grade": latest.overall_grade,
            "ats_score": latest.ats_score,
            "created_at": latest.created_at,
        }

    @staticmethod
    def _own_resumes(db: Session, user: User):
        return db.query(Resume).filter(
            Resume.tenant_id == user.tenant_id,
            Resume.user_id == user.id,
            Resume.deleted_at.is_(None),
        )
