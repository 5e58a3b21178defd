"""
Main FastAPI application for the website idea Refine Engine
"""
from contextlib import asynccontextmanager
from datetime import datetime
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from refine_engine.config import settings, validate_required_config
from refine_engine.logging_config import logger
from refine_engine.routers import refine
from refine_engine.services.providers import build_provider
from refine_engine.services.refine_service import PromptRefiner

SERVICE_NAME = "Website Idea Refine Engine"
VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting Refine Engine", environment=settings.ENVIRONMENT)

    # Validate required configuration
    validate_required_config()

    # Initialize Sentry if DSN provided
    if settings.SENTRY_DSN:
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            environment=settings.SENTRY_ENVIRONMENT,
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
            integrations=[FastApiIntegration()],
        )
        logger.info("Sentry initialized")

    # One provider for the whole process, shared by every request
    provider = build_provider(settings)
    app.state.provider = provider
    app.state.refiner = PromptRefiner(provider, min_length=settings.MIN_IDEA_LENGTH)

    if not provider.is_configured:
        logger.error("Provider credential not configured!", provider=provider.name)

    logger.info(
        "Refine Engine started",
        provider=provider.name,
        model=provider.model
    )

    yield

    logger.info("Shutting down Refine Engine")
    await provider.aclose()


# Create FastAPI app
app = FastAPI(
    title=SERVICE_NAME,
    description="Turns rough website ideas into build-ready prompts",
    version=VERSION,
    lifespan=lifespan
)

# Add rate limiter
app.state.limiter = refine.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware - Configure from environment
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in settings.CORS_ORIGINS.split(",")
    if origin.strip()
]

# In development, allow all origins for easier testing
if settings.ENVIRONMENT == "development" or settings.DEBUG:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,  # Cannot use credentials with wildcard origins
        allow_methods=["*"],
        allow_headers=["*"],
    )
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=["*"],
    )


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": SERVICE_NAME,
        "version": VERSION,
        "status": "running",
        "provider": settings.LLM_PROVIDER,
        "model": settings.provider_model
    }


@app.get("/health")
async def health_check(request: Request):
    """Provider configuration health check"""
    provider = getattr(request.app.state, "provider", None)
    configured = provider.is_configured if provider else bool(settings.provider_api_key)

    health = {
        "status": "healthy",
        "version": VERSION,
        "timestamp": datetime.utcnow().isoformat(),
        "checks": {
            "provider": {
                "name": settings.LLM_PROVIDER,
                "configured": configured,
                "status": "ok" if configured else "missing"
            }
        }
    }

    if not configured:
        health["status"] = "degraded"

    return health


@app.get("/readiness")
async def readiness_check(request: Request):
    """Kubernetes readiness probe"""
    health = await health_check(request)

    if health["status"] == "healthy":
        return {"status": "ready"}
    return JSONResponse(
        status_code=503,
        content={"status": "not_ready", "checks": health["checks"]}
    )


# Include routers
app.include_router(refine.router, prefix="/api", tags=["Refine"])


# Error handlers
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler with Sentry integration"""
    logger.error(
        "Unhandled exception",
        error=str(exc),
        path=request.url.path,
        exc_info=True
    )

    if settings.SENTRY_DSN:
        sentry_sdk.capture_exception(exc)

    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"}
    )


def run():
    """Start the service with uvicorn"""
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)


if __name__ == "__main__":
    run()
