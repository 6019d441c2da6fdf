"""
Analysis Service

Records analysis results produced by the external analyzer and announces
them. Scoring itself happens elsewhere.
"""
from typing import Any, Dict

from sqlalchemy.orm import Session

from resumehub.events import AnalysisCompleted, EventBus
from resumehub.models.analysis_result import AnalysisResult
from resumehub.models.resume import Resume
from resumehub.utils.logging import get_logger

logger = get_logger(__name__)


class AnalysisService:

    def __init__(self, event_bus: EventBus):
        self.event_bus = event_bus

    def complete(self, db: Session, resume: Resume, result_data: Dict[str, Any]) -> AnalysisResult:
        """
        Store a finished analysis, mark the resume analysed and raise
        AnalysisCompleted.

        The event is raised after the commit and is not awaited: listeners
        run on the bus workers.
        """
        analysis_result = AnalysisResult(resume_id=resume.id, **result_data)
        db.add(analysis_result)

        resume.analysis_status = "completed"
        db.commit()
        db.refresh(analysis_result)

        logger.info(
            f"Analysis {analysis_result.id} recorded for resume {resume.id} "
            f"(score={analysis_result.overall_score})",
            extra={"resume_id": resume.id, "tenant_id": resume.tenant_id}
        )

        self.event_bus.dispatch(AnalysisCompleted(resume=resume, analysis_result=analysis_result))
        return analysis_result

    def latest(self, db: Session, resume: Resume):
        return (
            db.query(AnalysisResult)
            .filter(AnalysisResult.resume_id == resume.id)
            .order_by(AnalysisResult.created_at.desc())
            .first()
        )
