import pytest
from sqlalchemy import select

from scripts.seed_categories import seed, slugify
from testbook.models import Category

pytestmark = pytest.mark.anyio


def test_slugify():
    assert slugify("General Studies") == "general-studies"
    assert slugify("  C++ & Data Structures ") == "c-data-structures"


async def test_seed_is_idempotent(session_factory, db):
    assert await seed(["Physics", "Banking Exams"], session_factory=session_factory) == 2
    assert await seed(["Physics", "Chemistry"], session_factory=session_factory) == 1

    slugs = (await db.execute(select(Category.slug).order_by(Category.slug))).scalars().all()
    assert slugs == ["banking-exams", "chemistry", "physics"]
