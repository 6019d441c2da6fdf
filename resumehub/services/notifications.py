"""
Notification Service

Channel-independent notification entry points. Delivery (mail, in-app,
push) belongs to whatever NotificationService the application is built with;
the default one records the notification in the log.
"""
from typing import Any, Dict, Optional, Protocol

from resumehub.models.analysis_result import AnalysisResult
from resumehub.models.resume import Resume
from resumehub.utils.logging import get_logger

logger = get_logger(__name__)

ANALYSIS_COMPLETE = "analysis_complete"


class NotificationService(Protocol):
    def send_analysis_complete(self, user_id: str, resume: Resume, analysis_result: AnalysisResult) -> bool:
        ...


class LoggingNotificationService:
    """Writes each notification as a log record."""

    def send_to_user(
        self,
        user_id: str,
        notification_type: str,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None
    ) -> bool:
        logger.info(
            f"Notification to user {user_id}: {title} - {message}",
            extra={"user_id": user_id, "event_type": notification_type, **(data or {})}
        )
        return True

    def send_analysis_complete(self, user_id: str, resume: Resume, analysis_result: AnalysisResult) -> bool:
        return self.send_to_user(
            user_id,
            ANALYSIS_COMPLETE,
            "Resume Analysis Complete",
            f"Your resume '{resume.original_filename}' has been analyzed successfully.",
            {
                "resume_id": resume.id,
                "analysis_id": analysis_result.id,
                "score": analysis_result.overall_score,
                "grade": analysis_result.overall_grade,
            }
        )
