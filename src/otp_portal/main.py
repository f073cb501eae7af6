"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from otp_portal.api.forms import router as forms_router
from otp_portal.api.otp import router as otp_router
from otp_portal.config import settings
from otp_portal.database.engine import dispose_db, init_db
from otp_portal.errors import PortalError

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle hook."""
    logger.info("Starting %s …", settings.app_name)
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    await init_db()
    logger.info("Databases initialised")
    yield
    logger.info("Shutting down %s …", settings.app_name)
    await dispose_db()


app = FastAPI(
    title=settings.app_name,
    description="Corporate-ID OTP login and idea submissions",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(otp_router)
app.include_router(forms_router)

app.mount(
    "/uploads",
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    """Translate OTP and form failures into ``{"message": ...}`` responses."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %r", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.get("/health")
async def health_check():
    """Simple liveness probe."""
    return {"status": "healthy", "app": settings.app_name}
