"""
Summons Assist API - Main Application.

FastAPI application that reads a court summons, extracts its key fields and
optionally enriches them with weather, transport and nearby-place advice.
"""

import logging
import os
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import get_settings
from errors import ErrorCode, ServiceError
from routers import summons_router
from schemas import HealthResponse, NormalizedError

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    logger.info("Starting Summons Assist API...")
    logger.info(f"LLM model: {settings.llm_model}")
    if not settings.llm_api_key:
        logger.warning("No LLM API key configured; relying on provider defaults")
    llm_budget = settings.llm_config().retry_budget_seconds
    if llm_budget >= settings.request_timeout_seconds:
        logger.warning(
            f"LLM retry budget ({llm_budget:g}s) exceeds the request timeout "
            f"({settings.request_timeout_seconds:g}s); requests will time out "
            "before retries are exhausted"
        )

    yield

    logger.info("Shutting down Summons Assist API...")


# Create FastAPI application
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description="""
    Summons Assist API - structured reading of Chinese court summonses.

    This API provides:
    - **Extraction**: Case number, cause, hearing time, court, address and
      summoned person from the summons text or PDF
    - **Enrichment**: Optional weather, transport and nearby-place advice,
      each fetched independently
    - **Narrative**: A deterministic summary combining everything above
    """,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(error: NormalizedError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status,
        content=error.model_dump(exclude_none=True),
    )


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """Return the NormalizedError carried by the exception."""
    logger.info(f"{request.method} {request.url.path} -> {exc.code} ({exc.status})")
    return _error_response(exc.error)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed caller payloads become INVALID_INPUT."""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return _error_response(
        NormalizedError(
            code=ErrorCode.INVALID_INPUT.value,
            status=400,
            message="Invalid request payload",
            details={"errors": errors},
        )
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    details = None
    if settings.expose_diagnostics:
        details = {
            "trace": "".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            )
        }

    return _error_response(
        NormalizedError(
            code=ErrorCode.UNHANDLED.value,
            status=500,
            message="An internal error occurred. Please try again.",
            details=details,
        )
    )


# Include routers
app.include_router(summons_router, prefix=settings.api_prefix)


# Health check endpoints
@app.get("/", tags=["health"])
async def root():
    """Root endpoint - API info."""
    return {
        "name": settings.api_title,
        "version": settings.api_version,
        "status": "running",
    }


@app.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=settings.api_version)


@app.get("/health/live", tags=["health"])
async def liveness_check():
    """
    Liveness probe for Kubernetes/Cloud Run.

    Returns 200 if the service is alive.
    """
    return {"status": "alive"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 8080)),
        reload=settings.debug,
    )
