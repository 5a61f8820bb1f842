"""
Live class catalog endpoints: listing, scheduling, detail, update and removal.
"""

import secrets
import time
from datetime import timedelta
from typing import Annotated
from uuid import UUID, uuid4

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import selectinload

from testbook.api.live_classes.schemas import (
    LiveClassCreate,
    LiveClassCreated,
    LiveClassDetail,
    LiveClassListQuery,
    LiveClassResponse,
    LiveClassUpdate,
)
from testbook.core.deps import (
    CurrentUserDep,
    InstructorDep,
    OptionalUserDep,
    SessionDep,
    is_owner_or_admin,
)
from testbook.core.errors import ConflictError, NotFoundError, PermissionError, ValidationError
from testbook.core.logging import get_logger
from testbook.core.time import to_naive_utc, utcnow
from testbook.models.enums import LiveClassStatus
from testbook.models.live_class import LiveClass, LiveClassAttendance
from testbook.schemas.common import DataResponse, MessageData, PageParams, PageResponse, changed_fields
from testbook.services.attendance_service import AttendanceService

router = APIRouter(prefix="/live-classes", tags=["live-classes"])
logger = get_logger(__name__)

SORT_COLUMNS = {
    "title": LiveClass.title,
    "start_time": LiveClass.start_time,
    "created_at": LiveClass.created_at,
}

NULLABLE_FIELDS = ("description", "subject", "max_attendees", "meeting_url", "meeting_password")

# Classes in these states hold the instructor's calendar
ACTIVE_STATUSES = [LiveClassStatus.SCHEDULED.value, LiveClassStatus.LIVE.value]


def _generate_meeting_id() -> str:
    return f"LC_{int(time.time() * 1000)}_{secrets.token_hex(5)}"


async def _load(db, live_class_id: str):
    result = await db.execute(
        select(LiveClass)
        .where(LiveClass.id == live_class_id)
        .options(selectinload(LiveClass.instructor))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _has_overlap(db, instructor_id: str, start_time, end_time, exclude_id=None) -> bool:
    """True when the instructor already holds an active class intersecting [start_time, end_time)"""
    stmt = select(LiveClass.id).where(
        LiveClass.instructor_id == instructor_id,
        LiveClass.status.in_(ACTIVE_STATUSES),
        LiveClass.start_time < end_time,
        LiveClass.end_time > start_time,
    )
    if exclude_id:
        stmt = stmt.where(LiveClass.id != exclude_id)
    return await db.scalar(stmt.limit(1)) is not None


@router.get("", response_model=PageResponse[LiveClassResponse])
async def list_live_classes(
    query: Annotated[LiveClassListQuery, Query()],
    db: SessionDep,
    current_user: OptionalUserDep,
    paging: PageParams = Depends(),
):
    """List live classes. Anonymous callers see public classes only."""
    conditions = []
    if query.search:
        conditions.append(
            or_(
                LiveClass.title.icontains(query.search, autoescape=True),
                LiveClass.description.icontains(query.search, autoescape=True),
                LiveClass.subject.icontains(query.search, autoescape=True),
            )
        )
    if query.subject:
        conditions.append(LiveClass.subject == query.subject)
    if query.status:
        conditions.append(LiveClass.status == query.status.value)
    if query.instructor_id:
        conditions.append(LiveClass.instructor_id == str(query.instructor_id))
    if current_user is None:
        conditions.append(LiveClass.is_public.is_(True))

    if query.sort_by:
        column = SORT_COLUMNS[query.sort_by]
        order = column.desc() if query.sort_order == "desc" else column.asc()
    else:
        order = LiveClass.start_time.asc()

    result = await db.execute(
        select(LiveClass)
        .where(*conditions)
        .options(selectinload(LiveClass.instructor))
        .order_by(order)
        .offset(paging.offset)
        .limit(paging.limit)
    )
    total = await db.scalar(select(func.count()).select_from(LiveClass).where(*conditions))

    return PageResponse(
        data=[LiveClassResponse.model_validate(lc) for lc in result.scalars().all()],
        meta=paging.meta(total or 0),
    )


@router.post(
    "",
    response_model=DataResponse[LiveClassCreated],
    status_code=status.HTTP_201_CREATED,
)
async def create_live_class(data: LiveClassCreate, db: SessionDep, instructor: InstructorDep):
    """
    Schedule a live class for the calling instructor.
    The instructor may not have another SCHEDULED or LIVE class overlapping it.
    """
    start_time = to_naive_utc(data.start_time)
    if start_time <= utcnow():
        raise ValidationError("Start time must be in the future")
    end_time = start_time + timedelta(minutes=data.duration)

    if await _has_overlap(db, instructor.id, start_time, end_time):
        raise ConflictError("You have a conflicting class scheduled at this time")

    live_class = LiveClass(
        id=str(uuid4()),
        title=data.title,
        description=data.description,
        subject=data.subject,
        instructor_id=instructor.id,
        start_time=start_time,
        end_time=end_time,
        max_attendees=data.max_attendees,
        is_public=data.is_public,
        status=LiveClassStatus.SCHEDULED.value,
        meeting_url=str(data.meeting_url) if data.meeting_url else None,
        meeting_id=data.meeting_id or _generate_meeting_id(),
        meeting_password=data.meeting_password,
        recording_enabled=data.recording_enabled,
        tags=data.tags,
    )
    db.add(live_class)
    await db.commit()
    await db.refresh(live_class, attribute_names=["instructor"])

    logger.info("Live class scheduled", live_class_id=live_class.id, instructor_id=instructor.id)
    return DataResponse(data=LiveClassCreated(live_class=LiveClassResponse.model_validate(live_class)))


@router.get("/{live_class_id}", response_model=DataResponse[LiveClassDetail])
async def get_live_class(live_class_id: UUID, db: SessionDep, current_user: OptionalUserDep):
    live_class = await _load(db, str(live_class_id))
    if not live_class:
        raise NotFoundError("Live class not found")

    if not live_class.is_public and (
        current_user is None or not is_owner_or_admin(current_user, live_class.instructor_id)
    ):
        raise PermissionError("You do not have permission to view this class")

    attendee_count = await AttendanceService(db).count_attendees(live_class.id)
    base = LiveClassResponse.model_validate(live_class)
    return DataResponse(data=LiveClassDetail(**base.model_dump(), attendee_count=attendee_count))


@router.put("/{live_class_id}", response_model=DataResponse[LiveClassCreated])
async def update_live_class(
    live_class_id: UUID,
    data: LiveClassUpdate,
    db: SessionDep,
    current_user: CurrentUserDep,
):
    """
    Partially update a class. Only its instructor or an admin may do so.

    Moving or resizing the slot is refused once the class is LIVE or COMPLETED;
    the new slot must lie in the future and not overlap the instructor's other
    active classes. `status` may be set directly, e.g. to CANCELLED.
    """
    live_class = await _load(db, str(live_class_id))
    if not live_class:
        raise NotFoundError("Live class not found")
    if not is_owner_or_admin(current_user, live_class.instructor_id):
        raise PermissionError("You do not have permission to update this class")

    values = changed_fields(data, nullable=NULLABLE_FIELDS)
    start_time = values.pop("start_time", None)
    duration = values.pop("duration", None)

    if start_time is not None or duration is not None:
        if live_class.status in (LiveClassStatus.LIVE.value, LiveClassStatus.COMPLETED.value):
            raise ValidationError("Cannot modify timing of live or completed classes")

        start_time = to_naive_utc(start_time) if start_time is not None else live_class.start_time
        if duration is None:
            length = live_class.end_time - live_class.start_time
        else:
            length = timedelta(minutes=duration)
        end_time = start_time + length

        if start_time <= utcnow():
            raise ValidationError("Start time must be in the future")
        if await _has_overlap(
            db, live_class.instructor_id, start_time, end_time, exclude_id=live_class.id
        ):
            raise ConflictError("You have a conflicting class scheduled at this time")

        live_class.start_time = start_time
        live_class.end_time = end_time

    if values.get("meeting_url") is not None:
        values["meeting_url"] = str(values["meeting_url"])
    if "status" in values:
        values["status"] = values["status"].value
    for key, value in values.items():
        setattr(live_class, key, value)

    user_id = current_user.id
    await db.commit()
    live_class = await _load(db, str(live_class_id))

    logger.info("Live class updated", live_class_id=live_class.id, user_id=user_id, status=live_class.status)
    return DataResponse(data=LiveClassCreated(live_class=LiveClassResponse.model_validate(live_class)))


@router.delete("/{live_class_id}", response_model=DataResponse[MessageData])
async def delete_live_class(live_class_id: UUID, db: SessionDep, current_user: CurrentUserDep):
    """Remove a class and its attendance rows. A LIVE or COMPLETED class that was attended is kept."""
    live_class = await db.get(LiveClass, str(live_class_id))
    if not live_class:
        raise NotFoundError("Live class not found")
    if not is_owner_or_admin(current_user, live_class.instructor_id):
        raise PermissionError("You do not have permission to delete this class")

    if live_class.status in (LiveClassStatus.LIVE.value, LiveClassStatus.COMPLETED.value):
        if await AttendanceService(db).count_attendees(live_class.id):
            raise ConflictError("Cannot delete live or completed classes with attendees")

    class_id, user_id = live_class.id, current_user.id
    await db.execute(delete(LiveClassAttendance).where(LiveClassAttendance.live_class_id == class_id))
    await db.execute(delete(LiveClass).where(LiveClass.id == class_id))
    await db.commit()

    logger.info("Live class deleted", live_class_id=class_id, user_id=user_id)
    return DataResponse(data=MessageData(message="Live class deleted successfully"))
