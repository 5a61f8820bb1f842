from testbook.models.base import Base
from testbook.models.course import Category, Course
from testbook.models.live_class import LiveClass, LiveClassAttendance
from testbook.models.user import User

__all__ = [
    "Base",
    "User",
    "Category",
    "Course",
    "LiveClass",
    "LiveClassAttendance",
]
