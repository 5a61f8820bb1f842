#!/usr/bin/env python3
"""
Seed the course categories.
Courses reference a category, and categories are managed out of band, so a
fresh database needs this before instructors can create courses.
"""

import argparse
import asyncio
import re
from uuid import uuid4

from sqlalchemy import select

from testbook.infra.db import AsyncSessionLocal, close_db_connection
from testbook.models.course import Category

DEFAULT_CATEGORIES = [
    "Physics",
    "Chemistry",
    "Mathematics",
    "Biology",
    "General Studies",
    "Banking Exams",
]


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


async def seed(names: list[str], session_factory=AsyncSessionLocal) -> int:
    async with session_factory() as db:
        existing = set((await db.execute(select(Category.slug))).scalars().all())
        created = 0
        for name in names:
            slug = slugify(name)
            if slug in existing:
                print(f"skip  {slug}")
                continue
            db.add(Category(id=str(uuid4()), name=name, slug=slug))
            existing.add(slug)
            created += 1
            print(f"add   {slug}")
        await db.commit()
    print(f"{created} categories created")
    return created


async def _run(names: list[str]) -> None:
    try:
        await seed(names)
    finally:
        await close_db_connection()


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("names", nargs="*", help="Category names (defaults to the built-in list)")
    args = parser.parse_args()
    asyncio.run(_run(args.names or DEFAULT_CATEGORIES))


if __name__ == "__main__":
    main()
