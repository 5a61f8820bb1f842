"""
API Router configuration
"""

from fastapi import APIRouter

from testbook.api import health
from testbook.api.auth import login, me, verify_email
from testbook.api.courses import router as courses
from testbook.api.live_classes import join, router as live_classes

api_router = APIRouter()

# 1. Public routes
api_router.include_router(health.router)
api_router.include_router(login.router)
api_router.include_router(verify_email.router)

# 2. Catalog routes (optional auth, writes require an instructor)
api_router.include_router(courses.router)
api_router.include_router(live_classes.router)

# 3. Attendance and profile (auth required)
api_router.include_router(join.router)
api_router.include_router(me.router)
