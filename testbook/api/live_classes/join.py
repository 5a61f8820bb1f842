from uuid import UUID

from fastapi import APIRouter

from testbook.api.live_classes.schemas import (
    AttendanceClosed,
    AttendanceJoined,
    ClassInfo,
    JoinData,
    LeaveData,
)
from testbook.core.deps import CurrentUserDep, SessionDep
from testbook.schemas.common import DataResponse
from testbook.services.attendance_service import AttendanceService

router = APIRouter(prefix="/live-classes", tags=["live-classes"])


@router.post("/{live_class_id}/join", response_model=DataResponse[JoinData])
async def join_live_class(live_class_id: UUID, current_user: CurrentUserDep, db: SessionDep):
    """
    Join a live class.
    Joining again while still inside the class returns the existing attendance.
    """
    result = await AttendanceService(db).join(str(live_class_id), current_user)
    live_class = result.live_class

    message = "Already joined the class" if result.already_joined else "Successfully joined the class"
    return DataResponse(
        data=JoinData(
            message=message,
            attendance=AttendanceJoined(id=result.attendance.id, joined_at=result.attendance.joined_at),
            meeting_url=live_class.meeting_url,
            meeting_id=live_class.meeting_id,
            meeting_password=live_class.meeting_password,
            class_info=ClassInfo(
                title=live_class.title,
                subject=live_class.subject,
                start_time=live_class.start_time,
                end_time=live_class.end_time,
                status=live_class.status,
            ),
        )
    )


@router.delete("/{live_class_id}/join", response_model=DataResponse[LeaveData])
async def leave_live_class(live_class_id: UUID, current_user: CurrentUserDep, db: SessionDep):
    """Leave a live class the caller is currently in"""
    attendance = await AttendanceService(db).leave(str(live_class_id), current_user.id)
    return DataResponse(
        data=LeaveData(
            message="Successfully left the class",
            attendance=AttendanceClosed(
                joined_at=attendance.joined_at,
                left_at=attendance.left_at,
                duration=attendance.duration,
            ),
        )
    )
