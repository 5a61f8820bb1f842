"""
Pydantic schemas for live classes and attendance.
"""

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, HttpUrl

from testbook.models.enums import LiveClassStatus


class LiveClassListQuery(BaseModel):
    search: Optional[str] = Field(None, max_length=200)
    subject: Optional[str] = None
    status: Optional[LiveClassStatus] = None
    instructor_id: Optional[UUID] = None
    sort_by: Optional[Literal["title", "start_time", "created_at"]] = None
    sort_order: Literal["asc", "desc"] = "asc"


class LiveClassCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=255)
    description: str = Field(..., min_length=10)
    subject: str = Field(..., min_length=2, max_length=128)
    start_time: datetime
    duration: int = Field(..., ge=15, description="Length in minutes")
    max_attendees: Optional[int] = Field(None, ge=1)
    meeting_url: Optional[HttpUrl] = None
    meeting_id: Optional[str] = Field(None, max_length=128)
    meeting_password: Optional[str] = Field(None, max_length=128)
    recording_enabled: bool = True
    is_public: bool = True
    tags: List[str] = Field(default_factory=list)


class InstructorSummary(BaseModel):
    id: str
    name: str
    avatar: Optional[str] = None

    class Config:
        from_attributes = True


class LiveClassUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged"""
    title: Optional[str] = Field(None, min_length=3, max_length=255)
    description: Optional[str] = Field(None, min_length=10)
    subject: Optional[str] = Field(None, min_length=2, max_length=128)
    start_time: Optional[datetime] = None
    duration: Optional[int] = Field(None, ge=15, description="Length in minutes")
    max_attendees: Optional[int] = Field(None, ge=1)
    meeting_url: Optional[HttpUrl] = None
    meeting_password: Optional[str] = Field(None, max_length=128)
    recording_enabled: Optional[bool] = None
    is_public: Optional[bool] = None
    status: Optional[LiveClassStatus] = None
    tags: Optional[List[str]] = None


class LiveClassResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    subject: Optional[str] = None
    start_time: datetime
    end_time: datetime
    status: str
    max_attendees: Optional[int] = None
    is_public: bool
    recording_enabled: bool
    meeting_id: Optional[str] = None
    meeting_url: Optional[str] = None
    tags: List[str]
    instructor: InstructorSummary
    created_at: datetime

    class Config:
        from_attributes = True


class LiveClassDetail(LiveClassResponse):
    attendee_count: int


class LiveClassCreated(BaseModel):
    live_class: LiveClassResponse


# ============ Attendance ============

class AttendanceJoined(BaseModel):
    id: str
    joined_at: datetime


class ClassInfo(BaseModel):
    title: str
    subject: Optional[str] = None
    start_time: datetime
    end_time: datetime
    status: str


class JoinData(BaseModel):
    message: str
    attendance: AttendanceJoined
    meeting_url: Optional[str] = None
    meeting_id: Optional[str] = None
    meeting_password: Optional[str] = None
    class_info: ClassInfo


class AttendanceClosed(BaseModel):
    joined_at: datetime
    left_at: datetime
    duration: int


class LeaveData(BaseModel):
    message: str
    attendance: AttendanceClosed
