"""
Resume Model

A resume is owned by exactly one user. user_id is set when the resume is
created and never changes; the resume policy authorizes every action by
comparing it with the acting user's id.

Resumes are soft-deleted so they can be restored. A permanent delete removes
the row and its analysis results.
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Index, Integer, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from resumehub.database import Base
import uuid


class Resume(Base):
    __tablename__ = "resumes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    tenant_id = Column(
        String(36),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Owner
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    filename = Column(String(255), nullable=False)
    original_filename = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=True)  # bytes
    file_type = Column(String(100), nullable=True)
    storage_path = Column(String(512), nullable=True)

    # pending, processing, completed, failed
    parsing_status = Column(String(20), default="pending", nullable=False)
    analysis_status = Column(String(20), default="pending", nullable=False, index=True)

    version = Column(Integer, default=1, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # "metadata" is reserved on declarative classes
    resume_metadata = Column("metadata", JSON, nullable=True, default=dict)

    deleted_at = Column(DateTime, nullable=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    tenant = relationship("Tenant", back_populates="resumes")
    user = relationship("User", back_populates="resumes")
    analysis_results = relationship(
        "AnalysisResult",
        back_populates="resume",
        cascade="all, delete-orphan",
        order_by="AnalysisResult.created_at",
    )

    __table_args__ = (
        Index('idx_resume_tenant_user', 'tenant_id', 'user_id', 'deleted_at'),
    )

    def __repr__(self):
        return f"<Resume {self.original_filename} (user={self.user_id})>"

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self):
        self.deleted_at = datetime.utcnow()

    def restore(self):
        self.deleted_at = None

    @property
    def file_size_human(self) -> str:
        size = self.file_size or 0
        if size >= 1048576:
            return f"{round(size / 1048576, 2)} MB"
        if size >= 1024:
            return f"{round(size / 1024, 2)} KB"
        return f"{size} bytes"
