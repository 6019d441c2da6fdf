from resumehub.events import AnalysisCompleted, CancellationToken
from resumehub.services.notifications import NotificationService
from resumehub.utils.logging import get_logger

logger = get_logger(__name__)


class SendAnalysisCompleteNotification:
    """Tells the resume owner that their analysis is ready."""

    def __init__(self, notification_service: NotificationService):
        self.notification_service = notification_service

    def handle(self, event: AnalysisCompleted, token: CancellationToken) -> None:
        token.raise_if_cancelled()
        resume = event.resume
        sent = self.notification_service.send_analysis_complete(resume.user_id, resume, event.analysis_result)
        if not sent:
            logger.warning(
                f"Analysis notification for resume {resume.id} was not sent",
                extra={"resume_id": resume.id, "user_id": resume.user_id}
            )
