"""
CRUD service layer for the course catalog.
"""

from typing import List, Optional, Tuple
from uuid import uuid4

from sqlalchemy import Select, delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from testbook.api.courses.schemas import CourseCreate, CourseListQuery, CourseUpdate
from testbook.core.errors import ConflictError, NotFoundError
from testbook.models.course import Category, Course
from testbook.schemas.common import changed_fields

NULLABLE_FIELDS = ("description", "price", "original_price", "estimated_hours", "thumbnail")

SORT_COLUMNS = {
    "title": Course.title,
    "price": Course.price,
    "created_at": Course.created_at,
}


def _filtered(stmt: Select, query: CourseListQuery, published_only: bool) -> Select:
    """Apply the conjunctive catalog filter to a select over Course"""
    if query.search:
        stmt = stmt.where(
            or_(
                Course.title.icontains(query.search, autoescape=True),
                Course.description.icontains(query.search, autoescape=True),
            )
        )
    if query.category:
        stmt = stmt.join(Category, Course.category_id == Category.id).where(
            Category.slug == query.category
        )
    if query.level:
        stmt = stmt.where(Course.level == query.level.value)
    if query.language:
        stmt = stmt.where(Course.language == query.language.value)
    if query.is_free is not None:
        stmt = stmt.where(Course.is_free == query.is_free)
    if published_only:
        stmt = stmt.where(Course.is_published.is_(True))
    return stmt


class CourseCRUD:
    """CRUD operations for Course model"""

    @staticmethod
    async def list(
        db: AsyncSession,
        query: CourseListQuery,
        published_only: bool,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Course], int]:
        """Fetch one page of courses and the total matching the same filter"""
        stmt = _filtered(select(Course), query, published_only).options(
            selectinload(Course.category), selectinload(Course.instructor)
        )
        if query.sort_by:
            column = SORT_COLUMNS[query.sort_by]
            stmt = stmt.order_by(column.desc() if query.sort_order == "desc" else column.asc())
        else:
            stmt = stmt.order_by(Course.created_at.desc())
        stmt = stmt.offset(skip).limit(limit)

        count_stmt = _filtered(select(func.count()).select_from(Course), query, published_only)

        result = await db.execute(stmt)
        total = await db.scalar(count_stmt)
        return list(result.scalars().all()), total or 0

    @staticmethod
    async def get_by_id(db: AsyncSession, course_id: str) -> Optional[Course]:
        """Get course by ID with its category and instructor loaded"""
        result = await db.execute(
            select(Course)
            .where(Course.id == course_id)
            .options(selectinload(Course.category), selectinload(Course.instructor))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_slug(db: AsyncSession, slug: str) -> Optional[Course]:
        result = await db.execute(select(Course).where(Course.slug == slug))
        return result.scalar_one_or_none()

    @staticmethod
    async def create(db: AsyncSession, course_data: CourseCreate, instructor_id: str) -> Course:
        """Create a new course after checking slug uniqueness and the category"""
        if await CourseCRUD.get_by_slug(db, course_data.slug):
            raise ConflictError("Course with this slug already exists")

        category = await db.get(Category, str(course_data.category_id))
        if not category:
            raise NotFoundError("Category not found")

        values = course_data.model_dump(mode="json")
        values["category_id"] = str(course_data.category_id)
        course = Course(id=str(uuid4()), instructor_id=instructor_id, **values)
        db.add(course)
        try:
            await db.commit()
        except IntegrityError:
            # Lost a race against a concurrent insert of the same slug
            await db.rollback()
            raise ConflictError("Course with this slug already exists")

        return await CourseCRUD.get_by_id(db, course.id)

    @staticmethod
    async def update(db: AsyncSession, course: Course, course_data: CourseUpdate) -> Course:
        """Apply a partial update, re-checking slug uniqueness and the category"""
        values = changed_fields(course_data, nullable=NULLABLE_FIELDS, mode="json")

        slug = values.get("slug")
        if slug and slug != course.slug and await CourseCRUD.get_by_slug(db, slug):
            raise ConflictError("Course with this slug already exists")

        if "category_id" in values and not await db.get(Category, values["category_id"]):
            raise NotFoundError("Category not found")

        for key, value in values.items():
            setattr(course, key, value)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("Course with this slug already exists")

        return await CourseCRUD.get_by_id(db, course.id)

    @staticmethod
    async def delete(db: AsyncSession, course_id: str) -> None:
        await db.execute(delete(Course).where(Course.id == course_id))
        await db.commit()
