"""FastAPI main application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from contractorpro.core.config import settings
from contractorpro.core.middleware import setup_middleware
from contractorpro.core.exceptions import ContractorProError

from contractorpro.api.auth import router as auth_router
from contractorpro.api.iam import router as iam_router
from contractorpro.api.hr import router as hr_router
from contractorpro.api.activity import router as activity_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("contractorpro")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting %s (%s)", settings.APP_NAME, settings.ENVIRONMENT)
    if settings.snapshots_enabled:
        logger.info("Activity snapshots go to bucket %s", settings.ACTIVITY_SNAPSHOT_BUCKET)
    else:
        logger.info("Activity snapshots disabled: no bucket configured")

    yield

    logger.info("Shutting down %s", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    description="HR and payroll back office with role-based access control",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Middleware
setup_middleware(app)


@app.exception_handler(ContractorProError)
async def contractorpro_exception_handler(request: Request, exc: ContractorProError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request", "issues": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


# Register routers
app.include_router(auth_router, prefix="/api")
app.include_router(iam_router, prefix="/api")
app.include_router(hr_router, prefix="/api")
app.include_router(activity_router, prefix="/api")


@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/api/health")
async def health():
    """Quick health check endpoint."""
    return {"status": "ok"}
