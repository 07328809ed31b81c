"""
Document: metadata plus approval lifecycle. File bytes live in document_files (one row per document)
so listings never load them; both rows are written in the same transaction.
"""
from datetime import datetime
from sqlalchemy import (
    String,
    Text,
    Boolean,
    Integer,
    BigInteger,
    LargeBinary,
    DateTime,
    CheckConstraint,
    ForeignKey,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.database import Base
from app.models.types import ApprovalStatus, check_values


class Document(Base):
    __tablename__ = "documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    uploaded_by_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    university_body_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("university_bodies.id", ondelete="SET NULL"), nullable=True, index=True
    )
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    approval_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ApprovalStatus.PENDING.value, index=True
    )
    approved_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=True
    )
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    requested_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    download_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(
            f"approval_status IN ({check_values(ApprovalStatus)})", name="documents_approval_status_check"
        ),
        CheckConstraint(
            "(approval_status = 'rejected') = (rejection_reason IS NOT NULL AND rejection_reason <> '')",
            name="documents_rejection_reason_check",
        ),
        CheckConstraint(
            "approval_status <> 'approved' OR (approved_by_id IS NOT NULL AND approved_at IS NOT NULL)",
            name="documents_approver_check",
        ),
        CheckConstraint("download_count >= 0", name="documents_download_count_check"),
    )

    uploaded_by = relationship("User", foreign_keys=[uploaded_by_id])
    approved_by = relationship("User", foreign_keys=[approved_by_id])
    university_body = relationship("UniversityBody", back_populates="documents")
    file = relationship(
        "DocumentFile", back_populates="document", uselist=False, cascade="all, delete-orphan", lazy="select"
    )


class DocumentFile(Base):
    __tablename__ = "document_files"

    document_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("documents.id", ondelete="CASCADE"), primary_key=True
    )
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    document = relationship("Document", back_populates="file")
