"""HireMe job board API."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1 import api_router
from app.config import settings
from app.core.exceptions import InvariantViolation, JobBoardError
from app.core.logging import init_sentry, setup_logging
from app.db.session import engine, init_db

setup_logging()
init_sentry()

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("application_started", environment=settings.ENVIRONMENT, gateway=settings.PAYMENT_GATEWAY)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Job board with payment-gated applications",
    lifespan=lifespan,
    swagger_ui_parameters={"persistAuthorization": True},
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.exception_handler(JobBoardError)
async def job_board_error_handler(request: Request, exc: JobBoardError):
    """Domain errors as ``{"detail", "error"}``."""
    if isinstance(exc, InvariantViolation):
        logger.error("invariant_violation", error=exc.error_code, detail=exc.message, path=request.url.path)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "error": exc.error_code})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled_exception", path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error": "internal_error"},
    )


@app.get("/", tags=["Health"])
async def root():
    return {"message": settings.APP_NAME, "version": settings.APP_VERSION, "status": "operational"}


@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "payment_gateway": settings.PAYMENT_GATEWAY,
    }
