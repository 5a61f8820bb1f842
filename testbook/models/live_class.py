from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from testbook.models.base import Base, TimestampMixin
from testbook.models.enums import LiveClassStatus

if TYPE_CHECKING:
    from testbook.models.user import User


class LiveClass(Base, TimestampMixin):
    __tablename__ = "live_classes"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    subject: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    instructor_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    max_attendees: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=LiveClassStatus.SCHEDULED.value
    )
    meeting_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    meeting_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    meeting_password: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    recording_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    # Indexes
    __table_args__ = (
        Index("idx_live_classes_instructor_start", "instructor_id", "start_time"),
        Index("idx_live_classes_status_start", "status", "start_time"),
    )

    # Relationships
    instructor: Mapped["User"] = relationship("User", back_populates="live_classes")
    attendances: Mapped[List["LiveClassAttendance"]] = relationship(
        "LiveClassAttendance", back_populates="live_class"
    )


class LiveClassAttendance(Base, TimestampMixin):
    __tablename__ = "live_class_attendances"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    live_class_id: Mapped[str] = mapped_column(ForeignKey("live_classes.id"), nullable=False)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    # left_at and duration are set together on leave and cleared together on rejoin
    left_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=False), nullable=True)
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Indexes
    __table_args__ = (
        UniqueConstraint("user_id", "live_class_id", name="uq_attendance_user_class"),
        Index("idx_attendance_class", "live_class_id"),
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="attendances")
    live_class: Mapped["LiveClass"] = relationship("LiveClass", back_populates="attendances")

    @property
    def is_open(self) -> bool:
        return self.left_at is None
