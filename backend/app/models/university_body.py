"""
University body: board, committee, council, department, office or other unit.
Documents and users reference it with ON DELETE SET NULL.
"""
from datetime import datetime
from sqlalchemy import String, Text, Boolean, Integer, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.database import Base
from app.models.types import BodyType, check_values


class UniversityBody(Base):
    __tablename__ = "university_bodies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default=BodyType.OTHER.value, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # No FK: users already reference university_bodies; nulled by the user service on delete.
    admin_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(f"type IN ({check_values(BodyType)})", name="university_bodies_type_check"),
    )

    admin = relationship("User", primaryjoin="foreign(UniversityBody.admin_id) == User.id", viewonly=True)
    members = relationship(
        "User", back_populates="university_body", foreign_keys="User.university_body_id", passive_deletes=True
    )
    documents = relationship("Document", back_populates="university_body", passive_deletes=True)
