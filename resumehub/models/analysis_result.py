"""
Analysis Result Model

Output of the external resume analyzer. Recording one marks the resume as
analysed and raises AnalysisCompleted.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from resumehub.database import Base
import uuid


# Lower bound of each grade, highest first
GRADE_THRESHOLDS = [
    (90, "A+"),
    (85, "A"),
    (80, "A-"),
    (75, "B+"),
    (70, "B"),
    (65, "B-"),
    (60, "C+"),
    (55, "C"),
    (50, "C-"),
    (45, "D+"),
    (40, "D"),
]


def grade_for_score(score: int) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "F"


class AnalysisResult(Base):
    __tablename__ = "analysis_results"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    resume_id = Column(
        String(36),
        ForeignKey("resumes.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    analysis_type = Column(String(50), default="full", nullable=False)

    overall_score = Column(Integer, nullable=False)
    ats_score = Column(Integer, nullable=True)
    content_score = Column(Integer, nullable=True)
    format_score = Column(Integer, nullable=True)
    keyword_score = Column(Integer, nullable=True)

    recommendations = Column(JSON, nullable=True, default=list)
    extracted_skills = Column(JSON, nullable=True, default=list)
    missing_skills = Column(JSON, nullable=True, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    resume = relationship("Resume", back_populates="analysis_results")

    def __repr__(self):
        return f"<AnalysisResult {self.id} resume={self.resume_id} score={self.overall_score}>"

    @property
    def overall_grade(self) -> str:
        return grade_for_score(self.overall_score or 0)
