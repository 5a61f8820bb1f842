from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON, Boolean, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from testbook.models.base import Base, TimestampMixin
from testbook.models.enums import CourseLevel, Language

if TYPE_CHECKING:
    from testbook.models.user import User


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    slug: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)

    # Relationships
    courses: Mapped[List["Course"]] = relationship("Course", back_populates="category")


class Course(Base, TimestampMixin):
    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category_id: Mapped[str] = mapped_column(ForeignKey("categories.id"), nullable=False)
    instructor_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    level: Mapped[str] = mapped_column(String(16), nullable=False, default=CourseLevel.BEGINNER.value)
    language: Mapped[str] = mapped_column(String(16), nullable=False, default=Language.ENGLISH.value)
    price: Mapped[Optional[float]] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=True)
    original_price: Mapped[Optional[float]] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=True)
    is_free: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    estimated_hours: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    thumbnail: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Indexes
    __table_args__ = (
        Index("idx_courses_published_created", "is_published", "created_at"),
        Index("idx_courses_instructor", "instructor_id"),
    )

    # Relationships
    category: Mapped["Category"] = relationship("Category", back_populates="courses")
    instructor: Mapped["User"] = relationship("User", back_populates="courses")
