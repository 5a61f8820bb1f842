"""
Pydantic schemas for the course catalog.
"""

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, HttpUrl

from testbook.models.enums import CourseLevel, Language


class CourseListQuery(BaseModel):
    """Filters accepted by the course listing"""
    search: Optional[str] = Field(None, max_length=200)
    category: Optional[str] = Field(None, description="Category slug")
    level: Optional[CourseLevel] = None
    language: Optional[Language] = None
    is_free: Optional[bool] = None
    sort_by: Optional[Literal["title", "price", "created_at"]] = None
    sort_order: Literal["asc", "desc"] = "asc"


class CourseCreate(BaseModel):
    """Schema for creating a new course"""
    title: str = Field(..., min_length=3, max_length=255)
    description: str = Field(..., min_length=10)
    slug: str = Field(..., min_length=3, max_length=255)
    category_id: UUID
    level: CourseLevel
    language: Language
    price: float = Field(..., ge=0)
    original_price: Optional[float] = Field(None, ge=0)
    is_free: bool = False
    estimated_hours: int = Field(..., ge=1)
    thumbnail: Optional[HttpUrl] = None
    tags: List[str] = Field(default_factory=list)
    is_published: bool = False


class CategorySummary(BaseModel):
    name: str
    slug: str

    class Config:
        from_attributes = True


class InstructorSummary(BaseModel):
    id: str
    name: str
    avatar: Optional[str] = None

    class Config:
        from_attributes = True


class CourseResponse(BaseModel):
    """Schema for course response"""
    id: str
    title: str
    description: Optional[str] = None
    slug: str
    level: str
    language: str
    price: Optional[float] = None
    original_price: Optional[float] = None
    is_free: bool
    estimated_hours: Optional[int] = None
    thumbnail: Optional[str] = None
    tags: List[str]
    is_published: bool
    category: CategorySummary
    instructor: InstructorSummary
    created_at: datetime

    class Config:
        from_attributes = True


class CourseCreated(BaseModel):
    course: CourseResponse


class CourseUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged"""
    title: Optional[str] = Field(None, min_length=3, max_length=255)
    description: Optional[str] = Field(None, min_length=10)
    slug: Optional[str] = Field(None, min_length=3, max_length=255)
    category_id: Optional[UUID] = None
    level: Optional[CourseLevel] = None
    language: Optional[Language] = None
    price: Optional[float] = Field(None, ge=0)
    original_price: Optional[float] = Field(None, ge=0)
    is_free: Optional[bool] = None
    estimated_hours: Optional[int] = Field(None, ge=1)
    thumbnail: Optional[HttpUrl] = None
    tags: Optional[List[str]] = None
    is_published: Optional[bool] = None
