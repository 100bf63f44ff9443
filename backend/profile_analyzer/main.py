from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from profile_analyzer.api import health, profiles
from profile_analyzer.core.config import settings
from profile_analyzer.core.exceptions import AnalyzerError, RateLimitedError, ValidationError
from profile_analyzer.core.logging import configure_logging
from profile_analyzer.db.session import init_db
import logging
import time

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    # Startup
    configure_logging()
    logger.info(f"{settings.PROJECT_NAME} starting up ({settings.ENVIRONMENT})...")
    await init_db()
    yield
    # Shutdown
    logger.info(f"{settings.PROJECT_NAME} shutting down")

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Fetches GitHub profiles and serves cached repository statistics",
    version=settings.VERSION,
    lifespan=lifespan
)


def _error_response(request: Request, status_code: int, error: dict, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error,
            "meta": {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "path": request.url.path,
                "method": request.method,
            },
        },
        headers=headers,
    )


@app.exception_handler(AnalyzerError)
async def analyzer_exception_handler(request: Request, exc: AnalyzerError):
    if exc.status_code >= 500:
        logger.error(f"[{exc.kind}] {request.method} {request.url.path}: {exc.message}")
    else:
        logger.warning(f"[{exc.kind}] {request.method} {request.url.path}: {exc.message}")

    headers = None
    if isinstance(exc, RateLimitedError) and exc.retry_after is not None:
        headers = {"Retry-After": str(exc.retry_after)}

    return _error_response(request, exc.status_code, exc.to_dict(), headers)


# Query/path parameters that fail pydantic validation are reported like any other bad input
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"[VALIDATION ERROR] on {request.url}: {exc.errors()}")
    message = ", ".join(
        f"{'.'.join(str(part) for part in error.get('loc', []))}: {error.get('msg', 'Invalid value')}"
        for error in exc.errors()
    )
    return _error_response(request, 400, ValidationError(message).to_dict())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return _error_response(request, 500, {"kind": "internal_error", "message": "Internal Server Error"})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.monotonic()
    logger.info(f"{request.method} {request.url.path}")
    response = await call_next(request)
    duration_ms = int((time.monotonic() - start_time) * 1000)
    logger.info(f"{request.method} {request.url.path} - {response.status_code} ({duration_ms}ms)")
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "DELETE"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/api/health", tags=["health"])
app.include_router(profiles.router, prefix=settings.API_PREFIX, tags=["profiles"])


@app.get("/")
async def index():
    """Describe the service and its endpoints."""
    return {
        "message": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "endpoints": {
            "profile": f"{settings.API_PREFIX}/profile/:username",
            "stats": f"{settings.API_PREFIX}/profile/:username/stats",
            "languages": f"{settings.API_PREFIX}/profile/:username/languages",
            "clearCache": f"DELETE {settings.API_PREFIX}/profile/:username/cache",
            "analyzedUsers": f"{settings.API_PREFIX}/users/analyzed",
        },
    }
