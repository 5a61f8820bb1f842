# tests/conftest.py
"""
Shared fixtures.

Every test gets a fresh in-memory SQLite database (aiosqlite, one shared
connection through StaticPool) and an httpx client talking to the ASGI app
with `get_db` overridden to use that database. Rate limiting is switched off
through the environment; tests/test_rate_limit.py turns it back on locally.
"""

from __future__ import annotations

import os

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-0123456789-abcdefghijklmnop")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENV"] = "test"
os.environ["DEBUG"] = "true"

from datetime import timedelta
from typing import Optional
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from testbook.core.security import get_password_hash
from testbook.core.time import utcnow
from testbook.core.token import create_access_token
from testbook.infra.db import get_db
from testbook.main import create_app
from testbook.models import Base, Category, Course, LiveClass, LiveClassAttendance, User

PASSWORD = "Secret123!"


@pytest.fixture(scope="session", autouse=True)
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False, autoflush=False)

    await engine.dispose()


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(session_factory):
    application = create_app()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db] = override_get_db
    return application


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


def auth_headers(user: User) -> dict:
    token = create_access_token(data={"sub": user.id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(db):
    async def _make(
        role: str = "STUDENT",
        status: str = "ACTIVE",
        email: Optional[str] = None,
        email_verified: bool = True,
        name: str = "Test User",
    ) -> User:
        user = User(
            id=str(uuid4()),
            email=email or f"user-{uuid4().hex[:8]}@example.com",
            name=name,
            hashed_password=get_password_hash(PASSWORD),
            role=role,
            status=status,
            email_verified=email_verified,
        )
        db.add(user)
        await db.commit()
        return user

    return _make


@pytest.fixture
async def instructor(make_user):
    return await make_user(role="INSTRUCTOR", name="Ada Instructor")


@pytest.fixture
async def student(make_user):
    return await make_user(name="Sam Student")


@pytest.fixture
async def category(db):
    cat = Category(id=str(uuid4()), name="Physics", slug="physics")
    db.add(cat)
    await db.commit()
    return cat


@pytest.fixture
def make_course(db, category, instructor):
    async def _make(slug: str, is_published: bool = True, **fields) -> Course:
        values = dict(
            title=f"Course {slug}",
            description="A course used in tests",
            level="BEGINNER",
            language="ENGLISH",
            price=0.0,
            is_free=True,
            estimated_hours=5,
            tags=[],
        )
        values.update(fields)
        course = Course(
            id=str(uuid4()),
            slug=slug,
            category_id=category.id,
            instructor_id=instructor.id,
            is_published=is_published,
            **values,
        )
        db.add(course)
        await db.commit()
        return course

    return _make


@pytest.fixture
def make_live_class(db, instructor):
    async def _make(
        start_in: timedelta = timedelta(minutes=-5),
        length: timedelta = timedelta(hours=1),
        status: str = "SCHEDULED",
        max_attendees: Optional[int] = None,
        is_public: bool = True,
        instructor_id: Optional[str] = None,
    ) -> LiveClass:
        start = utcnow() + start_in
        live_class = LiveClass(
            id=str(uuid4()),
            title="Kinematics revision",
            description="Live doubt clearing session",
            subject="Physics",
            instructor_id=instructor_id or instructor.id,
            start_time=start,
            end_time=start + length,
            max_attendees=max_attendees,
            is_public=is_public,
            status=status,
            meeting_url="https://meet.example.com/kinematics",
            meeting_id="LC_TEST",
            meeting_password="pw",
            tags=[],
        )
        db.add(live_class)
        await db.commit()
        return live_class

    return _make


@pytest.fixture
def add_attendance(db):
    async def _add(user: User, live_class: LiveClass, joined_ago: timedelta = timedelta(minutes=1),
                   left: bool = False) -> LiveClassAttendance:
        joined_at = utcnow() - joined_ago
        attendance = LiveClassAttendance(
            id=str(uuid4()),
            user_id=user.id,
            live_class_id=live_class.id,
            joined_at=joined_at,
            left_at=utcnow() if left else None,
            duration=int(joined_ago.total_seconds()) if left else None,
        )
        db.add(attendance)
        await db.commit()
        return attendance

    return _add
