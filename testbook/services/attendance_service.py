"""
Live class attendance lifecycle.

A user's attendance row for a class is created on first join, reopened on
rejoin and closed on leave. Joining is only allowed inside the attendance
window [start - early join, end + grace] and while the class has room.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from uuid import uuid4

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from testbook.core.config import settings
from testbook.core.errors import ConflictError, NotFoundError, PermissionError, ValidationError
from testbook.core.logging import get_logger
from testbook.core.time import utcnow
from testbook.models.enums import LiveClassStatus
from testbook.models.live_class import LiveClass, LiveClassAttendance
from testbook.models.user import User

logger = get_logger(__name__)


@dataclass
class JoinResult:
    attendance: LiveClassAttendance
    live_class: LiveClass
    already_joined: bool = False


class AttendanceService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_attendance(self, user_id: str, live_class_id: str) -> Optional[LiveClassAttendance]:
        result = await self.db.execute(
            select(LiveClassAttendance).where(
                LiveClassAttendance.user_id == user_id,
                LiveClassAttendance.live_class_id == live_class_id,
            )
        )
        return result.scalar_one_or_none()

    async def count_attendees(self, live_class_id: str) -> int:
        count = await self.db.scalar(
            select(func.count())
            .select_from(LiveClassAttendance)
            .where(LiveClassAttendance.live_class_id == live_class_id)
        )
        return count or 0

    def _check_window(self, live_class: LiveClass, now: datetime) -> None:
        early = settings.live_class_early_join_minutes
        if now < live_class.start_time - timedelta(minutes=early):
            raise ValidationError(
                f"Class has not started yet. You can join {early} minutes before start time."
            )
        if now > live_class.end_time + timedelta(hours=settings.live_class_grace_hours):
            raise ValidationError("This class has ended")

    async def join(self, live_class_id: str, user: User, now: Optional[datetime] = None) -> JoinResult:
        """
        Admit `user` to the class, checking in order: existence, visibility,
        lifecycle status, timing window and capacity. Nothing is written when
        a check fails.
        """
        now = now or utcnow()
        # A rollback below expires `user`; its id must not be reloaded lazily
        user_id = user.id

        live_class = await self.db.get(LiveClass, live_class_id)
        if not live_class:
            raise NotFoundError("Live class not found")

        if not live_class.is_public and user_id != live_class.instructor_id:
            raise PermissionError("This is a private class")

        if live_class.status == LiveClassStatus.CANCELLED.value:
            raise ValidationError("This class has been cancelled")
        if live_class.status == LiveClassStatus.COMPLETED.value:
            raise ValidationError("This class has already completed")

        self._check_window(live_class, now)

        if live_class.max_attendees:
            if await self.count_attendees(live_class_id) >= live_class.max_attendees:
                raise ConflictError("Class is full")

        attendance = await self.get_attendance(user_id, live_class_id)
        if attendance and attendance.is_open:
            return JoinResult(attendance=attendance, live_class=live_class, already_joined=True)

        if attendance:
            attendance.joined_at = now
            attendance.left_at = None
            attendance.duration = None
        else:
            attendance = LiveClassAttendance(
                id=str(uuid4()),
                user_id=user_id,
                live_class_id=live_class_id,
                joined_at=now,
            )
            self.db.add(attendance)

        # Guarded transition; a no-op unless the class is still SCHEDULED and has started
        await self.db.execute(
            update(LiveClass)
            .where(
                LiveClass.id == live_class_id,
                LiveClass.status == LiveClassStatus.SCHEDULED.value,
                LiveClass.start_time <= now,
            )
            .values(status=LiveClassStatus.LIVE.value, updated_at=now)
            .execution_options(synchronize_session=False)
        )

        try:
            await self.db.commit()
        except IntegrityError:
            # A concurrent request created this user's row first; its join stands
            await self.db.rollback()
            attendance = await self.get_attendance(user_id, live_class_id)
            if attendance is None:
                raise
            await self.db.refresh(live_class)
            return JoinResult(attendance=attendance, live_class=live_class, already_joined=True)

        await self.db.refresh(live_class)
        logger.info(
            "Joined live class",
            live_class_id=live_class_id,
            user_id=user_id,
            status=live_class.status,
        )
        return JoinResult(attendance=attendance, live_class=live_class)

    async def leave(self, live_class_id: str, user_id: str, now: Optional[datetime] = None) -> LiveClassAttendance:
        """Close the caller's open attendance and record its duration in whole seconds"""
        now = now or utcnow()

        if await self.db.get(LiveClass, live_class_id) is None:
            raise NotFoundError("Live class not found")

        attendance = await self.get_attendance(user_id, live_class_id)
        if not attendance or not attendance.is_open:
            raise ValidationError("You are not currently in this class")

        left_at = max(now, attendance.joined_at)
        attendance.left_at = left_at
        attendance.duration = int((left_at - attendance.joined_at).total_seconds())
        await self.db.commit()

        logger.info(
            "Left live class",
            live_class_id=live_class_id,
            user_id=user_id,
            duration=attendance.duration,
        )
        return attendance
