from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from testbook.models.base import Base, TimestampMixin
from testbook.models.enums import UserRole, UserStatus

if TYPE_CHECKING:
    from testbook.models.course import Course
    from testbook.models.live_class import LiveClass, LiveClassAttendance


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    avatar: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    hashed_password: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=UserRole.STUDENT.value)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=UserStatus.PENDING_VERIFICATION.value
    )
    email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    phone_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=False), nullable=True)

    # Relationships
    courses: Mapped[List["Course"]] = relationship("Course", back_populates="instructor")
    live_classes: Mapped[List["LiveClass"]] = relationship("LiveClass", back_populates="instructor")
    attendances: Mapped[List["LiveClassAttendance"]] = relationship(
        "LiveClassAttendance", back_populates="user"
    )
