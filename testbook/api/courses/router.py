"""
Course catalog endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from testbook.api.courses.crud import CourseCRUD
from testbook.api.courses.schemas import (
    CourseCreate,
    CourseCreated,
    CourseListQuery,
    CourseResponse,
    CourseUpdate,
)
from testbook.core.deps import (
    CurrentUserDep,
    InstructorDep,
    OptionalUserDep,
    SessionDep,
    is_owner_or_admin,
)
from testbook.core.errors import NotFoundError, PermissionError
from testbook.core.logging import get_logger
from testbook.schemas.common import DataResponse, MessageData, PageParams, PageResponse

router = APIRouter(prefix="/courses", tags=["courses"])
logger = get_logger(__name__)


@router.get(
    "",
    response_model=PageResponse[CourseResponse],
    summary="List courses",
)
async def list_courses(
    query: Annotated[CourseListQuery, Query()],
    db: SessionDep,
    current_user: OptionalUserDep,
    paging: PageParams = Depends(),
):
    """
    Search and filter the catalog.
    Anonymous callers only ever see published courses.
    """
    courses, total = await CourseCRUD.list(
        db,
        query,
        published_only=current_user is None,
        skip=paging.offset,
        limit=paging.limit,
    )
    return PageResponse(
        data=[CourseResponse.model_validate(c) for c in courses],
        meta=paging.meta(total),
    )


@router.post(
    "",
    response_model=DataResponse[CourseCreated],
    status_code=status.HTTP_201_CREATED,
    summary="Create a new course",
)
async def create_course(
    course_data: CourseCreate,
    db: SessionDep,
    instructor: InstructorDep,
):
    """
    Create a course owned by the calling instructor.
    - **slug** must be unique across the catalog (409 otherwise)
    - **category_id** must reference an existing category
    """
    course = await CourseCRUD.create(db, course_data, instructor_id=instructor.id)
    logger.info("Course created", course_id=course.id, slug=course.slug, instructor_id=instructor.id)
    return DataResponse(data=CourseCreated(course=CourseResponse.model_validate(course)))


@router.get(
    "/{course_id}",
    response_model=DataResponse[CourseResponse],
    summary="Get course by ID",
)
async def get_course(course_id: str, db: SessionDep, current_user: OptionalUserDep):
    course = await CourseCRUD.get_by_id(db, course_id)
    if not course or (current_user is None and not course.is_published):
        raise NotFoundError("Course not found")
    return DataResponse(data=CourseResponse.model_validate(course))


@router.put(
    "/{course_id}",
    response_model=DataResponse[CourseCreated],
    summary="Update a course",
)
async def update_course(
    course_id: str,
    course_data: CourseUpdate,
    db: SessionDep,
    current_user: CurrentUserDep,
):
    """
    Partially update a course. Only its instructor or an admin may do so.
    """
    course = await CourseCRUD.get_by_id(db, course_id)
    if not course:
        raise NotFoundError("Course not found")
    if not is_owner_or_admin(current_user, course.instructor_id):
        raise PermissionError("You do not have permission to update this course")

    user_id = current_user.id
    course = await CourseCRUD.update(db, course, course_data)
    logger.info("Course updated", course_id=course.id, user_id=user_id)
    return DataResponse(data=CourseCreated(course=CourseResponse.model_validate(course)))


@router.delete(
    "/{course_id}",
    response_model=DataResponse[MessageData],
    summary="Delete a course",
)
async def delete_course(course_id: str, db: SessionDep, current_user: CurrentUserDep):
    course = await CourseCRUD.get_by_id(db, course_id)
    if not course:
        raise NotFoundError("Course not found")
    if not is_owner_or_admin(current_user, course.instructor_id):
        raise PermissionError("You do not have permission to delete this course")

    await CourseCRUD.delete(db, course.id)
    logger.info("Course deleted", course_id=course_id, user_id=current_user.id)
    return DataResponse(data=MessageData(message="Course deleted successfully"))
