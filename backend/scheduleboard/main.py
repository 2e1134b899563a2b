from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scheduleboard.api.deps import shutdown_job_manager
from scheduleboard.api.routes import analysis, conflicts, health, optimizer
from scheduleboard.core.config import get_settings
from scheduleboard.core.exceptions import AppError
from scheduleboard.core.middleware import RequestSizeLimitMiddleware

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    shutdown_job_manager()


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
app.include_router(conflicts.router, prefix=f"{settings.api_prefix}/conflicts", tags=["conflicts"])
app.include_router(analysis.router, prefix=settings.api_prefix, tags=["analysis"])
app.include_router(optimizer.router, prefix=f"{settings.api_prefix}/optimizer", tags=["optimizer"])
