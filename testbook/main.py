"""
FastAPI Application Entry Point
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException

from testbook.api.router import api_router
from testbook.core.config import settings
from testbook.core.errors import (
    AppError,
    app_exception_handler,
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from testbook.core.logging import RequestIDMiddleware, RequestLoggingMiddleware, setup_logging
from testbook.infra.db import close_db_connection
from testbook.infra.redis import close_redis_pool, init_redis_pool


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging()
    await init_redis_pool()

    yield

    # Shutdown
    await close_redis_pool()
    await close_db_connection()


tags_metadata = [
    {
        "name": "auth",
        "description": "Sign-in, registration and email verification.",
    },
    {
        "name": "courses",
        "description": "Course catalog search and authoring.",
    },
    {
        "name": "live-classes",
        "description": "Live class scheduling and attendance.",
    },
    {
        "name": "health",
        "description": "System health check.",
    },
]


def create_app() -> FastAPI:
    app = FastAPI(
        title="TestBook Backend",
        description="""
TestBook API backs the e-learning platform.

## Features
* **Accounts**: Email/password sign-in and email verification.
* **Courses**: Searchable, paginated catalog with instructor authoring.
* **Live Classes**: Scheduling plus join/leave attendance tracking.
""",
        version="0.1.0",
        openapi_tags=tags_metadata,
        openapi_url=f"{settings.api_prefix}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        swagger_ui_parameters={
            "persistAuthorization": True,
            "displayRequestDuration": True
        },
        lifespan=lifespan,
    )

    # Middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # CORS Configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", tags=["health"], include_in_schema=False)
    async def root():
        return {
            "message": "Welcome to TestBook Backend API",
            "docs": "/docs",
            "status": "operational"
        }

    # Routes
    app.include_router(api_router, prefix=settings.api_prefix)

    # Exception Handlers
    app.add_exception_handler(AppError, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    return app


app = create_app()
