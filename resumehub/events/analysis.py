"""
Analysis events.
"""
from dataclasses import dataclass, field
from datetime import datetime

from resumehub.core.exceptions import PreconditionError
from resumehub.models.analysis_result import AnalysisResult
from resumehub.models.resume import Resume


@dataclass(frozen=True)
class AnalysisCompleted:
    """
    Raised once when an analysis result has been recorded for a resume.

    Both parts are required; constructing the event without them raises
    PreconditionError before anything is handed to listeners.
    """
    resume: Resume
    analysis_result: AnalysisResult
    occurred_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self):
        if self.resume is None:
            raise PreconditionError("AnalysisCompleted requires a resume")
        if self.analysis_result is None:
            raise PreconditionError("AnalysisCompleted requires an analysis result")
