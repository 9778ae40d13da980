from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from schedcore.api.routes import health, scheduled_subjects, scheduling
from schedcore.core.config import get_settings
from schedcore.core.exceptions import AppError
from schedcore.core.logging_config import configure_logging
from schedcore.core.middleware import RequestSizeLimitMiddleware

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging(settings.log_level)
    yield


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "details": exc.details},
    )

app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)

app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(scheduling.router, prefix=f"{settings.api_prefix}/schedule", tags=["schedule"])
app.include_router(
    scheduled_subjects.router,
    prefix=f"{settings.api_prefix}/scheduled-subjects",
    tags=["scheduled-subjects"],
)
